"""CRC-16/CCITT-FALSE checksum used by EMVCo QR payloads."""

POLYNOMIAL = 0x1021
INITIAL_VALUE = 0xFFFF


def crc16(data: str) -> str:
    """Compute the CRC-16/CCITT-FALSE checksum of ``data``.

    Polynomial 0x1021, initial register 0xFFFF, no input or output
    reflection and no final XOR. Each character's code point is fed in
    as one byte. Thai QR scanners reject payloads checked with any other
    CRC-16 variant.

    Parameters
    ----------
    data : str
        Payload text, including the trailing ``"6304"`` checksum header.

    Returns
    -------
    str
        Four uppercase hex digits.
    """
    crc = INITIAL_VALUE
    for char in data:
        crc ^= (ord(char) << 8) & 0xFFFF
        for _ in range(8):
            if crc & 0x8000:
                crc = ((crc << 1) ^ POLYNOMIAL) & 0xFFFF
            else:
                crc = (crc << 1) & 0xFFFF
    return f"{crc:04X}"
