"""
delimited.py - Reading the delimited results file into a raw table.

The results file is exported either with commas or, from locales that use a
decimal comma, with semicolons. The delimiter is sniffed from the header line:
a comma anywhere in it selects ``","``, anything else selects ``";"``. This is
a heuristic rather than a dialect detector; an atypical first line yields a
wrong guess, which then surfaces as missing columns during normalization.

All cells are kept as text so that locale artifacts such as ``"0,5"`` reach
the normalizer untouched.
"""

from pathlib import Path
from typing import Union

import pandas as pd
from loguru import logger

from ..exceptions import LoadError, log_and_raise

PathLike = Union[str, Path]

COMMA = ","
SEMICOLON = ";"
DEFAULT_ENCODING = "utf-8-sig"


def sniff_delimiter(first_line: str) -> str:
    """
    Pick the field delimiter from the header line.

    >>> sniff_delimiter("Subject,Compound,Dose")
    ','
    >>> sniff_delimiter("Subject;Compound;Dose")
    ';'
    """
    return COMMA if COMMA in first_line else SEMICOLON


def _read_first_line(path: Path, encoding: str) -> str:
    with open(path, "r", encoding=encoding, newline="") as handle:
        return handle.readline()


def load_table(file_path: PathLike, encoding: str = DEFAULT_ENCODING) -> pd.DataFrame:
    """
    Read a delimited results file into a DataFrame of text cells.

    Args:
        file_path: Path to the results file
        encoding: Text encoding (the default tolerates a UTF-8 byte order mark)

    Returns:
        DataFrame with stripped header names and every cell as ``str``; empty
        fields are empty strings

    Raises:
        LoadError: If the file is missing, not a file, undecodable, empty or
            unparseable
    """
    path = Path(file_path)
    context = {"file_path": path, "encoding": encoding}

    if not path.exists():
        log_and_raise(LoadError(f"Results file does not exist: {path}", "LOAD_001", context), logger)
    if not path.is_file():
        log_and_raise(LoadError(f"Results path is not a regular file: {path}", "LOAD_002", context), logger)

    try:
        first_line = _read_first_line(path, encoding)
        if not first_line.strip():
            raise LoadError(f"Results file is empty: {path}", "LOAD_004", context)

        delimiter = sniff_delimiter(first_line)
        context["delimiter"] = delimiter
        logger.debug(f"Sniffed delimiter {delimiter!r} for {path.name}")

        # Only empty fields are missing; "NA", "None" or "nan" stay as text
        table = pd.read_csv(path, sep=delimiter, dtype=str, encoding=encoding, keep_default_na=False)
    except LoadError:
        raise
    except UnicodeDecodeError as e:
        logger.error(f"Cannot decode {path} as {encoding}: {e}")
        raise LoadError(f"Results file cannot be decoded as {encoding}: {path}", "LOAD_003", context) from e
    except pd.errors.EmptyDataError as e:
        logger.error(f"No data in {path}: {e}")
        raise LoadError(f"Results file is empty: {path}", "LOAD_004", context) from e
    except pd.errors.ParserError as e:
        logger.error(f"Parser error when reading {path}: {e}")
        raise LoadError(f"Failed to parse results file {path}: {e}", "LOAD_005", context) from e
    except OSError as e:
        logger.error(f"I/O error when reading {path}: {e}")
        raise LoadError(f"Failed to read results file {path}: {e}", "LOAD_001", context) from e

    table.columns = [str(column).strip() for column in table.columns]

    if table.empty:
        logger.warning(f"Results file {path.name} has a header but no rows")
    logger.info(f"Loaded {len(table)} rows x {len(table.columns)} columns from {path.name}")
    return table
