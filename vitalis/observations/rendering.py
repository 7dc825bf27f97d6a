"""Locale-aware string rendering of observation values."""

from vitalis.observations.models import Observation

DEFAULT_DATE_FORMAT = "%d/%m/%Y"


def format_numeric(value: float) -> str:
    """Render a number, dropping the fractional part of integral values."""
    if value.is_integer():
        return str(int(value))
    return str(value)


def value_as_string(
    observation: Observation,
    locale: str,
    date_format: str = DEFAULT_DATE_FORMAT,
) -> str:
    """Render the value of an observation as display text.

    Coded answers use the answer concept's name in the locale, falling
    back to the concept id. An observation without a value renders as "".
    """
    if observation.value_coded is not None:
        coded = observation.value_coded
        name = coded.name_for(locale)
        return name if name is not None else str(coded.id)
    if observation.value_boolean is not None:
        return "true" if observation.value_boolean else "false"
    if observation.value_numeric is not None:
        return format_numeric(observation.value_numeric)
    if observation.value_datetime is not None:
        return observation.value_datetime.strftime(date_format)
    if observation.value_text is not None:
        return observation.value_text
    return ""
