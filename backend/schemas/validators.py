from typing import Optional


def required_text(value: str) -> str:
    """Strip a required text field and reject it when blank."""
    if value is None or not str(value).strip():
        raise ValueError("must not be blank")
    return str(value).strip()


def blank_to_none(value: Optional[str]) -> Optional[str]:
    """Form inputs send empty strings for untouched optional fields."""
    if isinstance(value, str) and not value.strip():
        return None
    return value
