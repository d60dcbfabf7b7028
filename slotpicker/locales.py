from __future__ import annotations

import calendar
from dataclasses import dataclass

from slotpicker.domain import UnknownLanguage


@dataclass(frozen=True)
class Locale:
    code: str
    month_names: tuple[str, ...]
    # Ordered starting at first_weekday, i.e. in grid column order.
    day_names: tuple[str, ...]
    # Python calendar convention: 0 = Monday ... 6 = Sunday
    first_weekday: int = calendar.SUNDAY


_LOCALES: dict[str, Locale] = {
    "en": Locale(
        code="en",
        month_names=(
            "January",
            "February",
            "March",
            "April",
            "May",
            "June",
            "July",
            "August",
            "September",
            "October",
            "November",
            "December",
        ),
        day_names=("S", "M", "T", "W", "T", "F", "S"),
        first_weekday=calendar.SUNDAY,
    ),
    "es": Locale(
        code="es",
        month_names=(
            "Enero",
            "Febrero",
            "Marzo",
            "Abril",
            "Mayo",
            "Junio",
            "Julio",
            "Agosto",
            "Septiembre",
            "Octubre",
            "Noviembre",
            "Diciembre",
        ),
        day_names=("L", "M", "X", "J", "V", "S", "D"),
        first_weekday=calendar.MONDAY,
    ),
}

SUPPORTED_LANGUAGES: tuple[str, ...] = tuple(_LOCALES)


def get_locale(code: str) -> Locale:
    try:
        return _LOCALES[code.strip().lower()]
    except KeyError:
        raise UnknownLanguage(
            f"Unsupported language {code!r}. Expected one of: {', '.join(SUPPORTED_LANGUAGES)}"
        ) from None
