from __future__ import annotations

import threading
import time
from pathlib import Path

from arcade_catalog.core.catalog import Catalog
from arcade_catalog.preview.slot import PreviewStatus

from conftest import FakeSource, touch, write_png


def _wait_until(predicate, timeout: float = 5.0) -> bool:
    deadline = time.monotonic() + timeout
    while time.monotonic() < deadline:
        if predicate():
            return True
        time.sleep(0.01)
    return False


def _entries(catalog: Catalog):
    return {e.name: e for e in catalog.store}


def test_fetch_async_marks_loading_then_finishes(nes_catalog: Catalog, source: FakeSource) -> None:
    nes_catalog.scan_station(0)
    gate = threading.Event()
    source.gate = gate
    source.responses = {"Named_Boxarts": True}

    assert nes_catalog.fetch_preview_async(_entries(nes_catalog)["Zelda"])
    assert nes_catalog.slot.status is PreviewStatus.LOADING
    assert source.entered.wait(5)
    assert not nes_catalog.fetch_poll()

    gate.set()
    assert _wait_until(nes_catalog.fetch_poll)
    assert nes_catalog.slot.status is PreviewStatus.READY
    assert nes_catalog.slot.rom_name == "Zelda"


def test_fetch_poll_without_job(catalog: Catalog) -> None:
    assert catalog.fetch_poll()


def test_fetch_async_is_single_flight(nes_catalog: Catalog, source: FakeSource) -> None:
    nes_catalog.scan_station(0)
    entries = _entries(nes_catalog)
    gate = threading.Event()
    source.gate = gate
    source.responses = {"Named_Boxarts": True}

    events = []
    lock = threading.Lock()

    def record(event):
        with lock:
            events.append(event)

    source.on_download = lambda url: record(("download", url.rsplit("/", 1)[-1]))

    nes_catalog.fetch_preview_async(entries["Zelda"])
    assert source.entered.wait(5)

    second_started = threading.Event()

    def start_second():
        nes_catalog.fetch_preview_async(entries["Super Mario"])
        record(("second-started", None))
        second_started.set()

    helper = threading.Thread(target=start_second)
    helper.start()

    # The second call blocks on joining the first fetch
    assert not second_started.wait(0.2)
    first_thread = nes_catalog.fetcher._thread

    transitions = []
    nes_catalog.slot.listener = lambda status: transitions.append(status)
    gate.set()
    helper.join(5)
    assert second_started.is_set()
    assert not first_thread.is_alive()

    assert _wait_until(nes_catalog.fetch_poll)
    assert nes_catalog.slot.rom_name == "Super Mario"
    assert events.index(("download", "Zelda.png")) < events.index(("second-started", None))
    assert events.index(("download", "Zelda.png")) < events.index(("download", "Super%20Mario.png"))

    # First fetch finishes READY; the second sets LOADING and then one terminal READY
    terminal = {PreviewStatus.READY, PreviewStatus.NOT_FOUND, PreviewStatus.ERROR, PreviewStatus.NO_INTERNET}
    after_second = transitions[transitions.index(PreviewStatus.LOADING):]
    assert [s for s in after_second if s in terminal] == [PreviewStatus.READY]


def test_cancelled_fetch_skips_work(nes_catalog: Catalog, source: FakeSource) -> None:
    nes_catalog.scan_station(0)
    entry = _entries(nes_catalog)["Zelda"]
    cancel = threading.Event()
    cancel.set()

    nes_catalog.fetcher._run_fetch(entry, cancel)
    assert source.probe_calls == 0


def test_batch_fetch_counts_and_reports(nes_catalog: Catalog, source: FakeSource, games_dir: Path) -> None:
    touch(games_dir / "NES" / "Contra.nes")
    touch(games_dir / "GB" / "Tetris.gb")
    gb = nes_catalog.add_station("Game Boy", "GB", "GB", "", "gb")
    nes_catalog.scan_all()
    write_png(games_dir / "previews" / "NES" / "Contra.png")
    source.responses = {"Super%20Mario": True}

    progress = []
    downloaded = nes_catalog.batch_fetch(0, lambda cur, total, name: progress.append((cur, total, name)))

    assert downloaded == 1
    assert progress == [(1, 3, "Contra"), (2, 3, "Super Mario"), (3, 3, "Zelda")]
    # Contra was cached; only the other two hit the network (three categories for Zelda)
    assert not any("Contra" in u for u in source.urls)
    assert not any("Tetris" in u for u in source.urls)
    assert sum("Zelda" in u for u in source.urls) == 3
    assert nes_catalog.store.count_for_station(gb) == 1


def test_batch_fetch_cancel(nes_catalog: Catalog, source: FakeSource) -> None:
    nes_catalog.scan_station(0)
    progress = []

    def on_progress(cur, total, name):
        progress.append(name)
        nes_catalog.batch_cancel()

    assert nes_catalog.batch_fetch(0, on_progress) == 0
    assert len(progress) == 1

    # The flag is cleared by the next batch
    progress.clear()
    nes_catalog.batch_fetch(0, lambda cur, total, name: progress.append(name))
    assert len(progress) == 2


def test_batch_fetch_unknown_station(catalog: Catalog) -> None:
    assert catalog.batch_fetch(3) == 0


def test_cache_clear_keeps_index_flags(nes_catalog: Catalog, games_dir: Path) -> None:
    write_png(games_dir / "previews" / "Zelda.png")
    write_png(games_dir / "previews" / "NES" / "Super Mario.png")
    nes_catalog.scan_station(0)

    assert nes_catalog.cache_clear() == 2
    assert list((games_dir / "previews").iterdir()) == []
    assert _entries(nes_catalog)["Zelda"].has_preview


def test_cache_clear_station(nes_catalog: Catalog, games_dir: Path) -> None:
    gb = nes_catalog.add_station("Game Boy", "GB", "GB", "", "gb")
    write_png(games_dir / "previews" / "NES" / "Zelda.png")
    write_png(games_dir / "previews" / "GB" / "Tetris.png")

    assert nes_catalog.cache_clear_station(0) == 1
    assert not (games_dir / "previews" / "NES" / "Zelda.png").exists()
    assert (games_dir / "previews" / "GB" / "Tetris.png").exists()
    assert nes_catalog.registry.get(gb) is not None


def test_purge_broken_previews_removes_empty_files(nes_catalog: Catalog, games_dir: Path) -> None:
    from arcade_catalog.core.maintenance import purge_broken_previews

    touch(games_dir / "previews" / "NES" / "Empty.png", b"")
    write_png(games_dir / "previews" / "NES" / "Zelda.png")

    assert purge_broken_previews(nes_catalog.config) == 1
    assert not (games_dir / "previews" / "NES" / "Empty.png").exists()
    assert (games_dir / "previews" / "NES" / "Zelda.png").exists()
