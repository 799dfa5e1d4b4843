"""Known time-zone rule signatures and Windows zone name mappings."""

from __future__ import annotations

from dataclasses import dataclass


@dataclass
class TzRule:
    """Offsets and recurrence rules of a VTIMEZONE's STANDARD and DAYLIGHT parts."""

    standard_offset_from: str = ""
    standard_offset_to: str = ""
    standard_rrule: str = ""
    daylight_offset_from: str = ""
    daylight_offset_to: str = ""
    daylight_rrule: str = ""

    def signature(self) -> str:
        """Return a string that identifies this rule set."""
        standard = f"{self.standard_offset_from}>{self.standard_offset_to};{self.standard_rrule}"
        daylight = f"{self.daylight_offset_from}>{self.daylight_offset_to};{self.daylight_rrule}"
        return f"STD:{standard}|DST:{daylight}"


def normalize_rrule(rule: str) -> str:
    """Upper-case, trim and sort the parts of an RRULE value."""
    if not rule:
        return ""
    parts = (piece.strip() for piece in rule.split(";"))
    return ";".join(sorted(piece.upper() for piece in parts if piece))


def _seasonal_rule(standard: str, daylight: str, to_standard: str, to_daylight: str) -> TzRule:
    """Build a rule that switches between a standard and a daylight offset."""
    return TzRule(
        standard_offset_from=daylight,
        standard_offset_to=standard,
        standard_rrule=normalize_rrule(to_standard),
        daylight_offset_from=standard,
        daylight_offset_to=daylight,
        daylight_rrule=normalize_rrule(to_daylight),
    )


_EU_AUTUMN = "FREQ=YEARLY;INTERVAL=1;BYDAY=-1SU;BYMONTH=10"
_EU_SPRING = "FREQ=YEARLY;INTERVAL=1;BYDAY=-1SU;BYMONTH=3"
_US_AUTUMN = "FREQ=YEARLY;BYMONTH=11;BYDAY=1SU"
_US_SPRING = "FREQ=YEARLY;BYMONTH=3;BYDAY=2SU"

_KNOWN_SIGNATURES: dict[str, TzRule] = {
    "Europe/Berlin": _seasonal_rule("+0100", "+0200", _EU_AUTUMN, _EU_SPRING),
    "Europe/London": _seasonal_rule("+0000", "+0100", _EU_AUTUMN, _EU_SPRING),
    "America/New_York": _seasonal_rule("-0500", "-0400", _US_AUTUMN, _US_SPRING),
}

# Each entry: IANA city, then the Windows name. A Windows name gets the
# suffix " Standard Time" unless it is written with a leading "=".
_WINDOWS_ZONE_TABLE = """
[Africa]
Nairobi         E. Africa
Cairo           Egypt
Tripoli         Libya
Casablanca      Morocco
Windhoek        Namibia
Sao_Tome        Sao Tome
Johannesburg    South Africa
Juba            South Sudan
Khartoum        Sudan
Lagos           W. Central Africa

[America]
Anchorage       Alaskan
Adak            Aleutian
Buenos_Aires    Argentina
Halifax         Atlantic
Bahia           Bahia
Regina          Canada Central
Guatemala       Central America
Cuiaba          Central Brazilian
Chicago         Central
Mexico_City     =Central Standard Time (Mexico)
Havana          Cuba
Sao_Paulo       E. South America
New_York        Eastern
Cancun          =Eastern Standard Time (Mexico)
Godthab         Greenland
Port-au-Prince  Haiti
Punta_Arenas    Magallanes
Montevideo      Montevideo
Denver          Mountain
Mazatlan        =Mountain Standard Time (Mexico)
St_Johns        Newfoundland
Santiago        Pacific SA
Los_Angeles     Pacific
Tijuana         =Pacific Standard Time (Mexico)
Asuncion        Paraguay
Cayenne         SA Eastern
Bogota          SA Pacific
La_Paz          SA Western
Miquelon        Saint Pierre
Araguaina       Tocantins
Grand_Turk      Turks And Caicos
Indianapolis    US Eastern
Phoenix         US Mountain
Caracas         Venezuela
Whitehorse      Yukon

[Asia]
Kabul           Afghanistan
Barnaul         Altai
Riyadh          Arab
Dubai           Arabian
Baghdad         Arabic
Baku            Azerbaijan
Dhaka           Bangladesh
Yerevan         Caucasus
Bishkek         Central Asia
Shanghai        China
Yekaterinburg   Ekaterinburg
Tbilisi         Georgian
Calcutta        India
Tehran          Iran
Jerusalem       Israel
Amman           Jordan
Seoul           Korea
Magadan         Magadan
Beirut          Middle East
Rangoon         Myanmar
Novosibirsk     N. Central Asia
Katmandu        Nepal
Irkutsk         North Asia East
Krasnoyarsk     North Asia
Pyongyang       North Korea
Omsk            Omsk
Karachi         Pakistan
Qyzylorda       Qyzylorda
Srednekolymsk   =Russia Time Zone 10
Kamchatka       =Russia Time Zone 11
Bangkok         SE Asia
Sakhalin        Sakhalin
Singapore       Singapore
Colombo         Sri Lanka
Damascus        Syria
Taipei          Taipei
Tokyo           Tokyo
Tomsk           Tomsk
Chita           Transbaikal
Ulaanbaatar     Ulaanbaatar
Vladivostok     Vladivostok
Hovd            W. Mongolia
Tashkent        West Asia
Hebron          West Bank
Yakutsk         Yakutsk

[Atlantic]
Azores          Azores
Cape_Verde      Cape Verde
Reykjavik       Greenwich

[Australia]
Darwin          AUS Central
Sydney          AUS Eastern
Eucla           Aus Central W.
Adelaide        Cen. Australia
Brisbane        E. Australia
Lord_Howe       Lord Howe
Hobart          Tasmania
Perth           W. Australia

[Etc]
GMT+12          Dateline
UTC             =UTC
GMT-12          =UTC+12
GMT-13          =UTC+13
GMT+2           =UTC-02
GMT+8           =UTC-08
GMT+9           =UTC-09
GMT+11          =UTC-11

[Europe]
Astrakhan       Astrakhan
Minsk           Belarus
Budapest        Central Europe
Warsaw          Central European
Chisinau        E. Europe
Kiev            FLE
London          GMT
Bucharest       GTB
Kaliningrad     Kaliningrad
Paris           Romance
Samara          =Russia Time Zone 3
Moscow          Russian
Saratov         Saratov
Istanbul        Turkey
Volgograd       Volgograd
Berlin          W. Europe

[Indian]
Mauritius       Mauritius

[Pacific]
Bougainville    Bougainville
Guadalcanal     Central Pacific
Chatham         Chatham Islands
Easter          Easter Island
Fiji            Fiji
Honolulu        Hawaiian
Kiritimati      Line Islands
Marquesas       Marquesas
Auckland        New Zealand
Norfolk         Norfolk
Apia            Samoa
Tongatapu       Tonga
Port_Moresby    West Pacific
"""

_STANDARD_SUFFIX = " Standard Time"


def _parse_zone_table(table: str) -> dict[str, str]:
    """Read the Windows zone table into a Windows-name to IANA-name mapping."""
    mapping: dict[str, str] = {}
    area = ""
    for raw in table.splitlines():
        line = raw.strip()
        if not line:
            continue
        if line.startswith("[") and line.endswith("]"):
            area = line[1:-1]
            continue
        city, windows_name = line.split(None, 1)
        windows_name = windows_name.strip()
        if windows_name.startswith("="):
            windows_name = windows_name[1:]
        else:
            windows_name += _STANDARD_SUFFIX
        mapping[windows_name] = f"{area}/{city}"
    return mapping


_WINDOWS_ZONE_MAPPING: dict[str, str] = _parse_zone_table(_WINDOWS_ZONE_TABLE)


def known_signature_mapping() -> dict[str, str]:
    """Return a fresh mapping from rule signature to IANA zone name."""
    return {rule.signature(): iana for iana, rule in _KNOWN_SIGNATURES.items()}


def known_windows_zone_mapping() -> dict[str, str]:
    """Return a fresh mapping from Windows zone name to IANA zone name."""
    return dict(_WINDOWS_ZONE_MAPPING)