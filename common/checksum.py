"""SHA-256 checksum of whole files, computed once before chunking."""

import hashlib

READ_PIECE_SIZE = 64 * 1024


def compute_checksum(data: bytes) -> str:
    """
    Compute SHA-256 checksum for given data.

    Args:
        data: Bytes to compute checksum for

    Returns:
        Hexadecimal string representation of SHA-256 hash
    """
    return hashlib.sha256(data).hexdigest()


def compute_file_checksum(path, piece_size: int = READ_PIECE_SIZE) -> str:
    """
    Compute SHA-256 checksum of a whole file.

    Args:
        path: Path of the file to hash
        piece_size: Bytes read per iteration

    Returns:
        Same digest compute_checksum() gives for the file's content
    """
    calculator = IncrementalChecksumCalculator()
    with open(path, 'rb') as f:
        while True:
            piece = f.read(piece_size)
            if not piece:
                break
            calculator.update(piece)
    return calculator.finalize()


class IncrementalChecksumCalculator:
    """
    Calculate SHA-256 checksum incrementally for streamed data.

    Usage:
        calculator = IncrementalChecksumCalculator()
        calculator.update(piece1)
        calculator.update(piece2)
        final_checksum = calculator.finalize()
    """

    def __init__(self):
        self._hasher = hashlib.sha256()
        self._finalized = False

    def update(self, data: bytes) -> None:
        if self._finalized:
            raise ValueError("Cannot update after finalization")
        self._hasher.update(data)

    def finalize(self) -> str:
        self._finalized = True
        return self._hasher.hexdigest()
