from fastapi import HTTPException


MIN_PASSWORD_LENGTH = 8


def validate_password_value(value: str) -> str:
    if len(value) < MIN_PASSWORD_LENGTH:
        raise HTTPException(
            status_code=400,
            detail=f"Password must be at least {MIN_PASSWORD_LENGTH} characters long"
        )

    has_letter = has_digit = False

    for char in value:
        if not has_letter and char.isalpha():
            has_letter = True
        elif not has_digit and char.isdigit():
            has_digit = True

        if has_letter and has_digit:
            break

    if not has_letter:
        raise HTTPException(status_code=400, detail="Password must contain at least one letter")
    if not has_digit:
        raise HTTPException(status_code=400, detail="Password must contain at least one digit")

    return value


def normalize_email(value: str) -> str:
    return value.strip().lower()


def reject_null_fields(data, fields: tuple[str, ...]):
    """
    Partial updates may leave a field out but not set a required one to null.

    Raises ValueError, which request validation reports as 422.
    """
    if isinstance(data, dict):
        nulled = [name for name in fields if name in data and data[name] is None]
        if nulled:
            raise ValueError(f"{', '.join(nulled)} cannot be null")
    return data
