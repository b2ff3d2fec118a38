import threading
import time
from pathlib import Path

from application.scheduler import DocumentScheduler
from domain.schemas import DocumentOutcome
from domain.taxonomy import TaxonomyAccumulator
from infrastructure.io import iter_document_paths
from infrastructure.store.memory import InMemoryStore


class _WriteRecorder:
    """on_write hook that records start/end events and peak concurrency."""

    def __init__(self, delay: float = 0.05) -> None:
        self.delay = delay
        self.events: list[tuple[str, str]] = []
        self.in_flight = 0
        self.peak = 0
        self._lock = threading.Lock()

    def __call__(self, table: str, key: str) -> None:
        with self._lock:
            self.in_flight += 1
            self.peak = max(self.peak, self.in_flight)
            self.events.append(("start", key))
        time.sleep(self.delay)
        with self._lock:
            self.in_flight -= 1
            self.events.append(("end", key))


def test_next_chunk_waits_for_previous_chunk(make_cfg, write_doc, content_dir) -> None:
    for name in ("a", "b", "c", "d"):
        write_doc(f"{name}.md", f"title: {name.upper()}")
    recorder = _WriteRecorder()
    store = InMemoryStore(on_write=recorder)
    scheduler = DocumentScheduler(cfg=make_cfg(batch_size=2), store=store, accumulator=TaxonomyAccumulator())

    results = scheduler.run(iter_document_paths(content_dir))

    assert [r.outcome for r in results] == [DocumentOutcome.PROCESSED] * 4
    assert recorder.peak == 2

    position = {event: i for i, event in enumerate(recorder.events)}
    last_end_first_chunk = max(position[("end", "a")], position[("end", "b")])
    first_start_second_chunk = min(position[("start", "c")], position[("start", "d")])
    assert last_end_first_chunk < first_start_second_chunk


def test_results_keep_input_order(make_cfg, write_doc, content_dir) -> None:
    for name in ("one", "two", "three"):
        write_doc(f"{name}.md")
    paths = iter_document_paths(content_dir)
    scheduler = DocumentScheduler(cfg=make_cfg(batch_size=5), store=InMemoryStore(), accumulator=TaxonomyAccumulator())

    results = scheduler.run(paths)

    assert [r.path for r in results] == [str(p) for p in paths]


def test_failed_task_does_not_affect_siblings(make_cfg, write_doc, content_dir) -> None:
    write_doc("good-1.md")
    write_doc("broken.md", "title: [unclosed")
    write_doc("good-2.md")
    store = InMemoryStore()
    scheduler = DocumentScheduler(cfg=make_cfg(batch_size=3), store=store, accumulator=TaxonomyAccumulator())

    results = {Path(r.path).name: r for r in scheduler.run(iter_document_paths(content_dir))}

    assert results["broken.md"].outcome is DocumentOutcome.FAILED
    assert results["broken.md"].stage == "parse"
    assert results["broken.md"].error
    assert results["good-1.md"].ok and results["good-2.md"].ok
    assert sorted(store.posts) == ["good-1", "good-2"]


def test_store_failure_is_tagged_with_persist_stage(make_cfg, write_doc, content_dir) -> None:
    write_doc("fine.md")
    write_doc("doomed.md")
    store = InMemoryStore(fail_slugs={"doomed"})
    scheduler = DocumentScheduler(cfg=make_cfg(), store=store, accumulator=TaxonomyAccumulator())

    failed = [r for r in scheduler.run(iter_document_paths(content_dir)) if not r.ok]

    assert len(failed) == 1
    assert failed[0].slug == "doomed"
    assert failed[0].stage == "persist"
    assert "injected failure" in failed[0].error


def test_skip_existing_checks_slug_before_writing(make_cfg, write_doc, content_dir) -> None:
    write_doc("kept.md", "title: Kept\ncategories: [Old]")
    store = InMemoryStore()
    first = DocumentScheduler(cfg=make_cfg(), store=store, accumulator=TaxonomyAccumulator())
    first.run(iter_document_paths(content_dir))

    accumulator = TaxonomyAccumulator()
    second = DocumentScheduler(cfg=make_cfg(skip_existing=True), store=store, accumulator=accumulator)
    results = second.run(iter_document_paths(content_dir))

    assert [r.outcome for r in results] == [DocumentOutcome.SKIPPED]
    # skipped documents contribute no taxonomy
    assert accumulator.categories == []
    assert len(store.write_log) == 1


def test_dry_run_accumulates_but_never_writes(make_cfg, write_doc, content_dir) -> None:
    write_doc("post.md", "categories: Web, Python\ntags: [x]")
    store = InMemoryStore()
    accumulator = TaxonomyAccumulator()
    scheduler = DocumentScheduler(cfg=make_cfg(dry_run=True), store=store, accumulator=accumulator)

    results = scheduler.run(iter_document_paths(content_dir))

    assert results[0].outcome is DocumentOutcome.PROCESSED
    assert results[0].content_id is None
    assert accumulator.categories == ["Web", "Python"]
    assert accumulator.tags == ["x"]
    assert store.write_log == []
