from typing import List, Optional
from pydantic import BaseModel, Field


class Station(BaseModel):
    """
    A user-configured game station (one console or collection).
    The id is the registry slot the station lives in.
    """
    id: int = Field(..., ge=0, description="Registry slot index")
    name: str = Field("", description="Display name, e.g. 'Nintendo Entertainment System'")
    short_name: str = Field("", description="Short code, e.g. 'NES'")
    rom_path: str = Field("", description="ROM folder, relative to a storage root or absolute")
    launcher: str = Field("", description="Core/launcher reference used to start an entry")
    extensions: str = Field("", description="Space separated extension allow-list")
    enabled: bool = Field(False)
    rom_count: int = Field(0, description="Entries found for this station by the last scan")

    class Config:
        populate_by_name = True
        extra = "ignore"


class StationTemplate(BaseModel):
    """Predefined station settings for common systems."""
    name: str
    short_name: str
    default_path: str
    launcher: str
    extensions: str

    class Config:
        frozen = True


def _t(name, short_name, default_path, launcher, extensions) -> StationTemplate:
    return StationTemplate(
        name=name,
        short_name=short_name,
        default_path=default_path,
        launcher=launcher,
        extensions=extensions,
    )


# Paths are relative to the games folder.
STATION_TEMPLATES: List[StationTemplate] = [
    _t("Nintendo Entertainment System", "NES", "NES", "NES", "nes"),
    _t("Super Nintendo", "SNES", "SNES", "SNES", "sfc smc bin"),
    _t("Sega Genesis / Mega Drive", "Genesis", "Genesis", "Genesis", "bin gen md smd"),
    _t("Sega Master System", "SMS", "SMS", "SMS", "sms sg"),
    _t("Game Boy", "GB", "GameBoy", "GAMEBOY", "gb gbc"),
    _t("Game Boy Color", "GBC", "GameBoy", "GAMEBOY", "gbc gb"),
    _t("Game Boy Advance", "GBA", "GBA", "GBA", "gba"),
    _t("Nintendo 64", "N64", "N64", "N64", "n64 z64 v64"),
    _t("Atari 2600", "A2600", "Atari2600", "ATARI2600", "a26 bin"),
    _t("Atari 7800", "A7800", "Atari7800", "ATARI7800", "a78 bin"),
    _t("Atari 5200", "A5200", "Atari5200", "ATARI5200", "a52 bin car"),
    _t("ColecoVision", "Coleco", "Coleco", "Coleco", "col bin rom"),
    _t("TurboGrafx-16 / PC Engine", "TG16", "TGFX16", "TGFX16", "pce bin sgx"),
    _t("Neo Geo", "NeoGeo", "NEOGEO", "NEOGEO", "neo"),
    _t("Arcade", "Arcade", "_Arcade", "", "mra"),
    _t("PlayStation 1", "PS1", "PSX", "PSX", "cue chd bin iso img pbp"),
    _t("PlayStation", "PSX", "PSX", "PSX", "cue chd bin iso img pbp"),
    _t("Sega CD / Mega CD", "SegaCD", "MegaCD", "MegaCD", "cue chd iso"),
    _t("Sega Saturn", "Saturn", "Saturn", "Saturn", "cue chd"),
    _t("Sega 32X", "S32X", "S32X", "S32X", "32x bin"),
    _t("Commodore 64", "C64", "C64", "C64", "prg crt t64 d64"),
    _t("Amiga", "Amiga", "Amiga", "Minimig", "adf hdf"),
    _t("Atari ST", "AtariST", "AtariST", "AtariST", "st stx"),
    _t("MSX", "MSX", "MSX", "MSX", "rom dsk cas mx1 mx2"),
    _t("ZX Spectrum", "Spectrum", "Spectrum", "Spectrum", "tap tzx z80 dsk trd"),
    _t("Amstrad CPC", "CPC", "Amstrad", "Amstrad", "dsk cdt cpr"),
    _t("Intellivision", "Intv", "Intellivision", "Intellivision", "int bin rom"),
    _t("Vectrex", "Vectrex", "Vectrex", "Vectrex", "vec bin rom"),
    _t("WonderSwan", "WS", "WonderSwan", "WonderSwan", "ws wsc"),
    _t("Neo Geo Pocket", "NGP", "NeoGeo", "NeoGeo", "ngp ngc"),
]


def find_template(short_name: str) -> Optional[StationTemplate]:
    """Case-insensitive lookup of a template by short name."""
    wanted = short_name.lower()
    for template in STATION_TEMPLATES:
        if template.short_name.lower() == wanted:
            return template
    return None
