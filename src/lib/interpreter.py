"""
Manifest interpreter

Applies the grammar in lib.schema to a stream of parse events, building
drafts as fields arrive and committing each to the bundle builder the
moment its object closes.

Key behaviors:
- One ManifestSession per run; nothing is kept at module level
- The first error latches: later events are drained without effect
- Every open draft is dropped on failure, so nothing half-built reaches
  the builder
- Glob blocks expand on close, handing each match to the builder before
  the next one is examined

Example:
    >>> import io
    >>> from rucksack.lib.bundle import BundlePlan
    >>> result = manifest_run(io.BytesIO(b'{}'), BundlePlan())
    >>> result.ok
    True
"""

from typing import Any, List, Optional

from ..models.events import Event
from ..models.interpreter import Outcome, RunConfig, RunResult
from ..models.manifest import (
    Anchor,
    AnchorPointDraft,
    DraftKind,
    FileDraft,
    GlobDraft,
    ImageDraft,
    PageDraft,
)
from .bundle import BundleBuilder, BundleError
from .errors import CollaboratorError, GrammarViolation, ManifestError, TokenizeError, ValueConstraint
from .globber import glob_expand
from .log import LOG
from .paths import path_resolve
from .schema import CommitDraft, Effect, OpenDraft, RecordField, ReportError, State, transition
from .tokenizer import Tokenizer


class ManifestSession:
    """
    State of one manifest interpretation

    Attributes:
        builder: Bundle builder receiving committed pages and files
        root_prefix: Directory relative manifest paths resolve against
        path_max: Longest resolved path accepted
        state: Current grammar position
        error: First error of the run, or None
        page, image, anchor, file, glob: Open drafts (None when closed)
        image_key: Name of the open image draft
        last_line, last_column: Position of the most recent event
    """

    def __init__(self, builder: BundleBuilder, root_prefix: str = ".", path_max: int = 4096) -> None:
        self.builder = builder
        self.root_prefix = root_prefix
        self.path_max = path_max
        self.state = State.START
        self.error: Optional[ManifestError] = None

        self.page: Optional[PageDraft] = None
        self.image: Optional[ImageDraft] = None
        self.image_key: Optional[str] = None
        self.anchor: Optional[AnchorPointDraft] = None
        self.file: Optional[FileDraft] = None
        self.glob: Optional[GlobDraft] = None

        self.pages_added = 0
        self.files_added = 0
        self.last_line = 1
        self.last_column = 1

    @property
    def failed(self) -> bool:
        return self.error is not None

    def feed(self, event: Event) -> Outcome:
        """
        Interpret one parse event

        Args:
            event: Next event from the tokenizer

        Returns:
            Outcome.ACCEPTED, Outcome.FAILED if this event caused the run's
            error, or Outcome.DRAINED if the session had already failed
        """
        if self.error is not None:
            return Outcome.DRAINED

        LOG(f"state: {self.state.name}, {event}", level=3)
        self.last_line, self.last_column = event.line, event.column

        next_state, effect = transition(self.state, event)
        try:
            if effect is not None:
                self.effect_apply(effect)
        except ManifestError as e:
            self.fail(e.position_set(event.line, event.column))
            return Outcome.FAILED

        self.state = next_state
        return Outcome.ACCEPTED

    def finish(self) -> Optional[ManifestError]:
        """
        Close the session at end of input

        Returns:
            The run's error, or None if the manifest was complete and valid
        """
        if self.error is None and self.state is not State.DONE:
            self.fail(GrammarViolation("unexpected EOF", self.last_line, self.last_column))
        return self.error

    def fail(self, error: ManifestError) -> None:
        """Latch the first error and drop every open draft"""
        if self.error is None:
            # the error is reported, never re-raised; its frames would keep drafts alive
            link: Optional[BaseException] = error
            while link is not None:
                link.__traceback__ = None
                link = link.__cause__ or link.__context__
            self.error = error
            dropped = ", ".join(type(draft).__name__ for draft in self.drafts_open())
            LOG(f"Interpretation failed: {error} (dropping: {dropped or 'nothing'})", level=2)
        self.drafts_release()

    def drafts_release(self) -> None:
        self.page = None
        self.image = None
        self.image_key = None
        self.anchor = None
        self.file = None
        self.glob = None

    def drafts_open(self) -> List[object]:
        """Currently open drafts, outermost first"""
        drafts = [self.page, self.image, self.anchor, self.file, self.glob]
        return [draft for draft in drafts if draft is not None]

    # ------------------------------------------------------------------
    # effects

    def effect_apply(self, effect: Effect) -> None:
        if isinstance(effect, ReportError):
            raise effect.error
        if isinstance(effect, OpenDraft):
            self.draft_open(effect.kind, effect.key)
        elif isinstance(effect, RecordField):
            self.field_record(effect.name, effect.value)
        elif isinstance(effect, CommitDraft):
            self.draft_commit(effect.kind)

    def draft_open(self, kind: DraftKind, key: str) -> None:
        if kind is DraftKind.PAGE:
            self.page = PageDraft(key=key)
        elif kind is DraftKind.IMAGE:
            self.image = ImageDraft()
            self.image_key = key
        elif kind is DraftKind.ANCHOR:
            self.anchor = AnchorPointDraft()
            self.image.anchor = Anchor.EXPLICIT
        elif kind is DraftKind.FILE:
            self.file = FileDraft(key=key)
        elif kind is DraftKind.GLOB:
            self.glob = GlobDraft()

    def field_record(self, name: str, value: Any) -> None:
        state = self.state

        if state is State.TEXTURE_MAX_WIDTH:
            self.page.max_width = value
        elif state is State.TEXTURE_MAX_HEIGHT:
            self.page.max_height = value
        elif state is State.TEXTURE_POW2:
            self.page.pow2 = value
        elif state is State.IMAGE_PROP_ANCHOR:
            self.image.anchor = value
        elif state is State.ANCHOR_X:
            self.anchor.x = value
        elif state is State.ANCHOR_Y:
            self.anchor.y = value
        elif state is State.IMAGE_PROP_PATH:
            self.image.path = self.path_resolve(value)
        elif state is State.FILE_PROP_PATH:
            self.file.path = self.path_resolve(value)
        elif state is State.GLOB_VALUE_GLOB:
            self.glob.pattern = self.path_resolve(value)
        elif state is State.GLOB_VALUE_PREFIX:
            self.glob.prefix = value

    def path_resolve(self, raw_path: str) -> str:
        return path_resolve(raw_path, self.root_prefix, self.path_max)

    def draft_commit(self, kind: DraftKind) -> None:
        if kind is DraftKind.ANCHOR:
            self.anchor_commit()
        elif kind is DraftKind.IMAGE:
            self.image_commit()
        elif kind is DraftKind.PAGE:
            self.page_commit()
        elif kind is DraftKind.FILE:
            self.file_commit()
        elif kind is DraftKind.GLOB:
            self.glob_commit()

    def anchor_commit(self) -> None:
        point = self.anchor
        for name in ("x", "y"):
            if getattr(point, name) is None:
                raise ValueConstraint(f"missing required field: {name}")
        self.image.anchor_x = point.x
        self.image.anchor_y = point.y
        self.anchor = None

    def image_commit(self) -> None:
        if self.image.path is None:
            raise ValueConstraint("missing required field: path")
        if self.image_key in self.page.images:
            raise ValueConstraint(f"duplicate image name: {self.image_key}")
        self.page.images[self.image_key] = self.image
        self.image = None
        self.image_key = None

    def page_commit(self) -> None:
        page, self.page = self.page, None
        try:
            self.builder.page_add(page.key, page)
        except BundleError as e:
            raise CollaboratorError(f"unable to add page: {e}") from None
        self.pages_added += 1
        LOG(f"Added page {page.key} ({len(page.images)} images)", level=2)

    def file_commit(self) -> None:
        draft, self.file = self.file, None
        if draft.path is None:
            raise ValueConstraint("missing required field: path")
        try:
            self.builder.file_add(draft.key, draft.path)
        except BundleError as e:
            raise CollaboratorError(f"unable to add file: {e}") from None
        self.files_added += 1
        LOG(f"Added file {draft.key}", level=2)

    def glob_commit(self) -> None:
        draft, self.glob = self.glob, None
        if draft.pattern is None:
            raise ValueConstraint("missing required field: glob")
        if draft.prefix is None:
            raise ValueConstraint("missing required field: prefix")

        for key, path in glob_expand(draft.pattern, draft.prefix, self.root_prefix):
            try:
                self.builder.file_add(key, path)
            except BundleError as e:
                raise CollaboratorError(f"unable to add {path}: {e}") from None
            self.files_added += 1
            LOG(f"Added file {key} (glob)", level=2)


def manifest_run(stream: Any, builder: BundleBuilder, config: Optional[RunConfig] = None) -> RunResult:
    """
    Interpret a manifest read from a stream

    Reads the stream chunk by chunk, tokenizes, and feeds every event to a
    fresh ManifestSession. After the first error the rest of the input is
    still tokenized and drained so the whole document is consumed; a
    tokenizer error ends reading immediately.

    Args:
        stream: Binary (or text) file-like object with read(size)
        builder: Bundle builder receiving committed entities
        config: Run settings (defaults from AppSettings)

    Returns:
        RunResult with the first error, if any, and commit counts
    """
    if config is None:
        config = RunConfig.config_createFromSettings()

    session = ManifestSession(builder, config.root_prefix, config.path_max)
    tokenizer = Tokenizer(config.max_value_size, config.max_depth)
    LOG(f"Interpreting manifest (root prefix {config.root_prefix})", level=2)

    try:
        while True:
            chunk = stream.read(config.chunk_size)
            if not chunk:
                break
            for event in tokenizer.feed(chunk):
                session.feed(event)
        for event in tokenizer.eof():
            session.feed(event)
    except TokenizeError as e:
        session.fail(e)

    session.finish()
    return RunResult(
        error=session.error,
        pages_added=session.pages_added,
        files_added=session.files_added,
    )
