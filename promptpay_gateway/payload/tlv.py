"""EMVCo tag-length-value field formatting."""

from promptpay_gateway.exceptions import PayloadEncodingError

MAX_VALUE_LENGTH = 99


def field(tag: str, value: str) -> str:
    """Format one TLV field.

    Parameters
    ----------
    tag : str
        Two-digit field ID.
    value : str
        Field value. An empty value omits the field entirely.

    Returns
    -------
    str
        ``tag + two-digit length + value``, or ``""`` for an empty value.

    Raises
    ------
    PayloadEncodingError
        If the tag is not two digits or the value is longer than 99
        characters. Values are never truncated.
    """
    if len(tag) != 2 or not tag.isdigit():
        raise PayloadEncodingError(f"TLV tag must be two digits, got {tag!r}")
    if not value:
        return ""
    if len(value) > MAX_VALUE_LENGTH:
        raise PayloadEncodingError(
            f"TLV value for tag {tag} is {len(value)} characters; limit is {MAX_VALUE_LENGTH}"
        )
    return f"{tag}{len(value):02d}{value}"


def parse(data: str) -> list[tuple[str, str]]:
    """Split a TLV string into ordered ``(tag, value)`` pairs.

    Raises
    ------
    PayloadEncodingError
        If a header is malformed or a value runs past the end of ``data``.
    """
    fields: list[tuple[str, str]] = []
    pos = 0
    while pos < len(data):
        header = data[pos : pos + 4]
        if len(header) < 4 or not header.isdigit():
            raise PayloadEncodingError(f"Malformed TLV header {header!r} at offset {pos}")
        tag, length = header[:2], int(header[2:])
        start = pos + 4
        end = start + length
        if end > len(data):
            raise PayloadEncodingError(f"TLV value for tag {tag} at offset {pos} is truncated")
        fields.append((tag, data[start:end]))
        pos = end
    return fields
