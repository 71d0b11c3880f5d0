"""
End-to-end pipeline tests

Tests the command line pipeline: manifest file → env_check →
manifest_interpret → plan_write → results_report, with the diagnostics
and exit codes of failed runs.
"""

import json
from argparse import Namespace

import pytest

from rucksack.__main__ import env_check, manifest_interpret, plan_write, results_report
from rucksack.config import AppSettings
from rucksack.models import ProgramState, RunConfig, pipeline


MANIFEST = """{
  textures: {
    ui: {
      maxWidth: 512,
      images: {
        ok: {path: "img/ok.png", anchor: "bottomleft"},
      },
    },
  },
  files: {
    credits: {path: "credits.txt"},
  },
  globFiles: [
    {glob: "sfx/*.ogg", prefix: "sound/"},
  ],
}
"""


@pytest.fixture
def project(tmp_path):
    """Input directory holding a manifest and its assets"""
    inputdir = tmp_path / "in"
    for name in ("img/ok.png", "credits.txt", "sfx/jump.ogg"):
        path = inputdir / name
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_bytes(b"asset")
    (inputdir / "assets.json").write_text(MANIFEST)
    return inputdir, tmp_path / "out"


def state_make(inputdir, outputdir, **options):
    values = {"manifest": "assets.json", "bundleFile": None, "prefix": str(inputdir), "verbosity": 0}
    values.update(options)
    return ProgramState.state_createFromNamespace(Namespace(**values), inputdir, outputdir)


class TestPipeline:
    """Test a complete successful run"""

    def test_plan_written(self, project):
        inputdir, outputdir = project
        state = pipeline(state_make(inputdir, outputdir), env_check, manifest_interpret, plan_write, results_report)

        assert state.envOK
        assert (state.runResult.pages_added, state.runResult.files_added) == (1, 2)

        data = json.loads((outputdir / "bundle.json").read_text())
        assert [a["key"] for a in data["actions"]] == ["ui", "credits", "sound/sfx/jump.ogg"]
        image = data["actions"][0]["images"][0]
        assert image["anchor"] == "bottomleft"
        assert image["path"] == str(inputdir / "img" / "ok.png")

    def test_custom_bundle_file(self, project):
        inputdir, outputdir = project
        state = state_make(inputdir, outputdir, bundleFile="game.json")
        pipeline(state, env_check, manifest_interpret, plan_write)
        assert (outputdir / "game.json").is_file()

    def test_state_not_mutated(self, project):
        """Each stage returns a new state"""
        inputdir, outputdir = project
        initial = state_make(inputdir, outputdir)
        checked = env_check(initial)
        assert checked is not initial
        assert initial.runConfig is None
        assert checked.runConfig.root_prefix == str(inputdir)


class TestFailures:
    """Test exit codes and the error stream"""

    def test_missing_manifest(self, project, capsys):
        inputdir, outputdir = project
        with pytest.raises(SystemExit) as exc:
            env_check(state_make(inputdir, outputdir, manifest="nope.json"))
        assert exc.value.code == 1
        assert "Unable to open input file: " in capsys.readouterr().err

    def test_invalid_manifest(self, project, capsys):
        inputdir, outputdir = project
        (inputdir / "assets.json").write_text('{\n  "textures2": {}\n}\n')
        state = env_check(state_make(inputdir, outputdir))
        with pytest.raises(SystemExit) as exc:
            manifest_interpret(state)
        assert exc.value.code == 1
        err = capsys.readouterr().err
        assert err == "line 2, col 3: unknown top level property: textures2\n"
        assert not (outputdir / "bundle.json").exists()

    def test_excerpt_when_verbose(self, project, capsys):
        inputdir, outputdir = project
        (inputdir / "assets.json").write_text('{\n  "textures2": {}\n}\n')
        state = env_check(state_make(inputdir, outputdir, verbosity=2))
        with pytest.raises(SystemExit):
            manifest_interpret(state)
        err = capsys.readouterr().err.splitlines()
        assert err[1:] == ['    "textures2": {}', "    ^"]

    def test_missing_asset(self, project, capsys):
        inputdir, outputdir = project
        (inputdir / "credits.txt").unlink()
        state = env_check(state_make(inputdir, outputdir))
        with pytest.raises(SystemExit):
            manifest_interpret(state)
        err = capsys.readouterr().err
        assert "unable to add file: problem accessing file: " in err
        assert err.startswith("line 11, col 34: ")


class TestConfiguration:
    """Test RunConfig built from RUCKSACK_ settings"""

    def test_environment_settings(self, monkeypatch):
        monkeypatch.setenv("RUCKSACK_ROOT_PREFIX", "/srv/assets")
        monkeypatch.setenv("RUCKSACK_PATH_MAX", "128")
        config = RunConfig.config_createFromSettings(AppSettings())
        assert (config.root_prefix, config.path_max) == ("/srv/assets", 128)
        assert config.chunk_size == 16384

    def test_explicit_values_win(self):
        """CLI values override settings; unset (None) ones do not"""
        config = RunConfig.config_createFromSettings(AppSettings(), root_prefix="assets", path_max=None)
        assert config.root_prefix == "assets"
        assert config.path_max == 4096
