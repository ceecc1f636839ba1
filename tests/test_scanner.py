from __future__ import annotations

from pathlib import Path

import pytest

from arcade_catalog.core.catalog import Catalog
from arcade_catalog.errors import StationNotFoundError
from arcade_catalog.scanner.file_system import extract_display_name, match_extension

from conftest import touch, write_png


@pytest.mark.parametrize(
    "filename, extensions, expected",
    [
        ("game.nes", "nes", True),
        ("GAME.NES", "nes", True),
        ("game.nes", "NES", True),
        ("game.bin", "sfc smc bin", True),
        ("game.bin", "  sfc   bin ", True),
        ("readme.txt", "nes", False),
        ("noextension", "nes", False),
        ("noextension", "", True),
        ("anything.xyz", "", True),
        ("readme.txt", "   ", False),
        ("archive.tar.gz", "tar", False),
        ("archive.tar.gz", "gz", True),
        ("long.abcdefghij", "abcdefgh", True),
        ("long.abcdefghij", "abcdefghij", False),
    ],
)
def test_match_extension(filename: str, extensions: str, expected: bool) -> None:
    assert match_extension(filename, extensions) is expected


def test_extract_display_name() -> None:
    assert extract_display_name("Super_Mario_Bros.nes") == "Super Mario Bros"
    assert extract_display_name("Game.v1.1.zip") == "Game.v1.1"
    assert extract_display_name("plain") == "plain"


def test_scan_station_scenario(nes_catalog: Catalog) -> None:
    assert nes_catalog.scan_station(0) == 2

    names = sorted(e.name for e in nes_catalog.store)
    assert names == ["Super Mario", "Zelda"]
    assert all(e.filename != "readme.txt" for e in nes_catalog.store)
    assert nes_catalog.registry.get(0).rom_count == 2

    mario = next(e for e in nes_catalog.store if e.name == "Super Mario")
    assert mario.filename == "Super_Mario.nes"
    assert mario.size == 40
    assert Path(mario.path).is_absolute()
    assert mario.has_preview is False


def test_rescan_is_idempotent(nes_catalog: Catalog) -> None:
    first = nes_catalog.scan_station(0)
    names_first = [e.name for e in nes_catalog.store]
    second = nes_catalog.scan_station(0)
    names_second = [e.name for e in nes_catalog.store]

    assert first == second == 2
    assert names_first == names_second
    assert nes_catalog.store.count() == 2


def test_rescan_preserves_other_stations_order(nes_catalog: Catalog, games_dir: Path) -> None:
    touch(games_dir / "GB" / "Tetris.gb")
    touch(games_dir / "GB" / "Kirby.gb")
    gb = nes_catalog.add_station("Game Boy", "GB", "GB", "GAMEBOY", "gb")
    nes_catalog.scan_station(gb)
    nes_catalog.scan_station(0)

    gb_names = [e.name for e in nes_catalog.store if e.station_id == gb]
    assert gb_names == ["Kirby", "Tetris"]
    assert [e.station_id for e in nes_catalog.store] == [gb, gb, 0, 0]


def test_hidden_names_and_depth_limit(nes_catalog: Catalog, games_dir: Path) -> None:
    touch(games_dir / "NES" / ".hidden.nes")
    touch(games_dir / "NES" / ".cache" / "Secret.nes")
    deep = games_dir / "NES"
    for level in range(7):
        deep = deep / f"d{level}"
    touch(deep / "TooDeep.nes")
    touch(games_dir / "NES" / "d0" / "d1" / "d2" / "d3" / "d4" / "JustRight.nes")

    nes_catalog.scan_station(0)
    names = {e.name for e in nes_catalog.store}
    assert "JustRight" in names
    assert "TooDeep" not in names
    assert "Secret" not in names
    assert ".hidden" not in names


def test_preview_probe_sets_flag(nes_catalog: Catalog, games_dir: Path) -> None:
    write_png(games_dir / "previews" / "Zelda.png")
    write_png(games_dir / "NES" / "previews" / "Super Mario.png")

    nes_catalog.scan_station(0)
    by_name = {e.name: e for e in nes_catalog.store}
    assert by_name["Zelda"].has_preview
    assert by_name["Zelda"].preview_path == str(games_dir / "previews" / "Zelda.png")
    assert by_name["Super Mario"].has_preview
    assert by_name["Super Mario"].preview_path.endswith("NES/previews/Super Mario.png")


def test_secondary_storage_root(catalog: Catalog, tmp_path: Path) -> None:
    touch(tmp_path / "media" / "SNES" / "Zelda_3.sfc")
    sid = catalog.add_station("Super Nintendo", "SNES", "SNES", "SNES", "sfc smc")
    assert catalog.scan_station(sid) == 1
    assert catalog.store.get(0).name == "Zelda 3"


def test_absolute_rom_path_is_walked_once(catalog: Catalog, tmp_path: Path) -> None:
    roms = tmp_path / "elsewhere" / "gba"
    touch(roms / "Metroid.gba")
    sid = catalog.add_station("GBA", "GBA", str(roms), "GBA", "gba")
    assert catalog.scan_station(sid) == 1


def test_scan_unknown_station(catalog: Catalog) -> None:
    with pytest.raises(StationNotFoundError):
        catalog.scan_station(4)


def test_cancel_mid_scan_keeps_added_entries(nes_catalog: Catalog, games_dir: Path) -> None:
    for i in range(5):
        touch(games_dir / "NES" / f"Game_{i}.nes")

    store = nes_catalog.store
    original_append = store.append

    def append_then_cancel(entry):
        index = original_append(entry)
        nes_catalog.scan_cancel()
        return index

    store.append = append_then_cancel
    assert nes_catalog.scan_station(0) == 1
    assert store.count() == 1

    # The flag is cleared when the next scan starts
    store.append = original_append
    assert nes_catalog.scan_station(0) == 7


def test_cancel_before_scan_is_cleared(nes_catalog: Catalog) -> None:
    nes_catalog.scan_cancel()
    assert nes_catalog.scan_station(0) == 2


def test_scan_all_sums_and_reports_progress(nes_catalog: Catalog, games_dir: Path) -> None:
    touch(games_dir / "GB" / "Tetris.gb")
    nes_catalog.add_station("Game Boy", "GB", "GB", "GAMEBOY", "gb")

    messages = []
    assert nes_catalog.scan_all(progress_callback=messages.append) == 3
    assert nes_catalog.scanner.progress == 100
    assert nes_catalog.scanner.status == "Scan complete"
    assert "Scanning NES..." in messages
    assert "Scanning GB..." in messages


def test_scan_all_continues_past_failures(nes_catalog: Catalog, games_dir: Path) -> None:
    touch(games_dir / "GB" / "Tetris.gb")
    nes_catalog.add_station("Game Boy", "GB", "GB", "GAMEBOY", "gb")

    walker = nes_catalog.scanner.walker
    original_walk = walker.walk

    def flaky_walk(root, extensions, on_file):
        if root.endswith("NES"):
            raise OSError("disk went away")
        return original_walk(root, extensions, on_file)

    walker.walk = flaky_walk
    assert nes_catalog.scan_all() == 1
    assert [e.name for e in nes_catalog.store] == ["Tetris"]


def test_scan_refreshes_browse_view(nes_catalog: Catalog) -> None:
    nes_catalog.browse(None)
    assert nes_catalog.view.available() == 0
    nes_catalog.scan_station(0)
    assert nes_catalog.view.available() == 2


def test_scan_all_keeps_cancel_raised_between_stations(nes_catalog: Catalog, games_dir: Path,
                                                       monkeypatch: pytest.MonkeyPatch) -> None:
    touch(games_dir / "GB" / "Tetris.gb")
    nes_catalog.add_station("Game Boy", "GB", "GB", "GAMEBOY", "gb")

    registry = nes_catalog.registry
    original_count = registry.count
    calls = []

    def count_then_cancel():
        calls.append(1)
        # First call is the start banner, second is the progress step for NES
        if len(calls) == 2:
            nes_catalog.scan_cancel()
        return original_count()

    monkeypatch.setattr(registry, "count", count_then_cancel)
    assert nes_catalog.scan_all() == 0
    assert not any(e.name == "Tetris" for e in nes_catalog.store)
