# -*- coding: utf-8 -*-

""" qfx2qif / Convert a QFX (OFX/SGML) bank download into a QIF bank file
"""

import argparse
import string
import sys
from pathlib import Path
from typing import NamedTuple

from loguru import logger

from custom_loguru import LOG_DIRECTORY, defineLoggers
from QIF_boilerplate import (
    MAX_FIELD_LENGTH,
    QFX_FILE_EXT,
    QIF_FILE_EXT,
    SW_DATE,
    SW_VERSION,
    qfx_tag_open,
    qfx_xact_amount,
    qfx_xact_date,
    qfx_xact_end,
    qfx_xact_memo,
    qfx_xact_name,
    qfx_xact_start,
    qif_file_header,
    qif_unknown_name,
    qif_xact_amount,
    qif_xact_cleared,
    qif_xact_date,
    qif_xact_end,
    qif_xact_memo,
    qif_xact_name,
)

RUNTIME_NAME = Path(__file__).name

# exit statuses, argparse itself uses 2 for a bad command line
EXIT_OK = 0
EXIT_USAGE_ERROR = 2
EXIT_MISSING_INPUT = 3
EXIT_FILENAME_ERROR = 4
EXIT_READ_ERROR = 5
EXIT_WRITE_ERROR = 6

# only ASCII letters fold, bytes above 0x7f are left alone
ASCII_FOLD = str.maketrans(string.ascii_uppercase, string.ascii_lowercase)
DOCUMENT_ENCODING = "latin-1"  # one character per byte, nothing is converted


class ConversionResult(NamedTuple):
    transaction_count: int
    memo_suppressed: bool


class QifTransaction(NamedTuple):
    date: str
    amount: str
    payee: str
    memo: str


def fold_case(text):
    return text.translate(ASCII_FOLD)


def find_nocase(haystack, needle, start=0):
    """find_nocase(text to search, text to find, starting index)
    Return the index of the first match at or after start ignoring ASCII case, or -1.
    An empty needle matches at start.
    """
    if not needle:
        return start if start <= len(haystack) else -1
    return fold_case(haystack).find(fold_case(needle), start)


def extract_tag_content(text, tag, max_length=MAX_FIELD_LENGTH):
    """extract_tag_content(text, tag name, maximum length)
    Return (value, found) for the first <TAG> in text.
    The value runs up to the matching </TAG>, or when the tag is left open
    (the usual SGML style) up to the next '<' or the end of text.
    Values longer than max_length are cut without complaint.
    Nesting is not looked at, a <NAME> inside a nested aggregate such as
    <PAYEE> is taken just the same.
    """
    opentag = f"<{tag}>"
    closetag = f"</{tag}>"
    p = find_nocase(text, opentag)
    if p < 0:
        return "", False
    p += len(opentag)  # move to content start
    q = find_nocase(text, closetag, p)
    if q < 0:
        # fallback: copy until next '<' or end
        q = text.find(qfx_tag_open, p)
        if q < 0:
            q = len(text)
    return text[p:q][:max_length], True


def next_transaction_block(document, position=0, folded=None):
    """next_transaction_block(document, scan position, case folded document)
    Return (content_start, block_end) for the next transaction at or after position,
    or None when there are no more. A block missing its end marker is never returned.
    block_end is just past </STMTTRN> and is where the following search starts.
    """
    if folded is None:
        folded = fold_case(document)
    marker = folded.find(fold_case(qfx_xact_start), position)
    if marker < 0:
        return None
    gt = document.find(">", marker)
    if gt < 0:
        return None
    content_start = gt + 1
    close = folded.find(fold_case(qfx_xact_end), content_start)
    if close < 0:
        return None
    return content_start, close + len(qfx_xact_end)


def iter_transaction_blocks(document):
    """Yield (content_start, block_end) for every transaction in document order."""
    folded = fold_case(document)
    position = 0
    while True:
        block = next_transaction_block(document, position, folded)
        if block is None:
            return
        logger.debug(f"Transaction block found at {block[0]}:{block[1]}")
        yield block
        position = block[1]


def ofxdate_to_qifdate(token):
    """ofxdate_to_qifdate(YYYYMMDD... token)
    Return (MM/DD/YYYY, True), or (token, False) when the first eight characters
    are missing or are not all digits. Trailing time of day is ignored and the
    calendar is not checked, 20241399 becomes 13/99/2024.
    """
    if len(token) < 8 or not all(c in string.digits for c in token[:8]):
        return token, False
    yyyy, mm, dd = token[0:4], token[4:6], token[6:8]
    return f"{mm}/{dd}/{yyyy}", True


def recover_date(token):
    """recover_date(raw DTPOSTED value)
    Return the best date text available, a transaction is never dropped for its date.
    """
    qifdate, ok = ofxdate_to_qifdate(token)
    if ok:
        return qifdate
    if len(token) >= 8:
        qifdate, ok = ofxdate_to_qifdate(token[:8])
        if ok:
            return qifdate
        return token[:8]
    return token


def sanitize_text(text):
    """Replace carriage returns and line feeds so a value stays on one QIF line."""
    return text.replace("\r", " ").replace("\n", " ")


def clean_amount(amount):
    """Remove thousands separators, QIF amounts carry none."""
    return amount.replace(",", "")


def read_block_field(block, tag):
    value, _ = extract_tag_content(block, tag)
    return value.strip(string.whitespace)  # C locale whitespace only


@logger.catch
def normalize_transaction(block):
    """normalize_transaction(text of one transaction block)
    Return a QifTransaction, or None when the block has no amount and must be skipped.
    """
    dtposted = read_block_field(block, qfx_xact_date)
    trnamt = read_block_field(block, qfx_xact_amount)
    name = sanitize_text(read_block_field(block, qfx_xact_name))
    memo = sanitize_text(read_block_field(block, qfx_xact_memo))
    if trnamt == "":
        return None
    return QifTransaction(
        date=recover_date(dtposted),
        amount=clean_amount(trnamt),
        payee=name,
        memo=memo,
    )


def format_qif_transaction(xact, include_memos):
    """format_qif_transaction(QifTransaction, include memos flag)
    Return the list of QIF lines for one transaction.
    """
    lines = [
        f"{qif_xact_date}{xact.date}\n",
        f"{qif_xact_name}{xact.payee or qif_unknown_name}\n",
    ]
    if xact.memo and include_memos:
        lines.append(f"{qif_xact_memo}{xact.memo}\n")
    lines.append(f"{qif_xact_amount}{xact.amount}\n")
    lines.append(f"{qif_xact_cleared}\n")
    lines.append(f"{qif_xact_end}\n")
    return lines


def log_transaction(xact, include_memos):
    memo = xact.memo
    if memo and not include_memos:
        memo = "EXCLUDED"
    logger.debug(f"{xact.date}\t{xact.payee[:16]}\t{memo[:8]}\t${xact.amount}")


@logger.catch(reraise=True)
def convert(document, include_memos, output):
    """convert(document text or bytes, include memos flag, writable text stream)
    Write the QIF header and one record per usable transaction block to output.
    Return a ConversionResult with the number of records written and whether
    any memo was left out because include_memos was False.
    """
    if isinstance(document, bytes):
        document = document.decode(DOCUMENT_ENCODING)
    output.write(qif_file_header)
    xacts_found = 0
    memo_suppressed = False
    for content_start, block_end in iter_transaction_blocks(document):
        xact = normalize_transaction(document[content_start:block_end])
        if xact is None:
            logger.debug(f"Skipping transaction at {content_start} with no {qfx_xact_amount}")
            continue
        output.writelines(format_qif_transaction(xact, include_memos))
        if xact.memo and not include_memos:
            memo_suppressed = True
        log_transaction(xact, include_memos)
        xacts_found += 1
    return ConversionResult(xacts_found, memo_suppressed)


def resolve_filenames(input_name, output_name=None):
    """resolve_filenames(input file name, optional output file name)
    Return (input Path, output Path) with default extensions filled in.
    Raises ValueError when a name has no file name part to carry an extension.
    """
    input_path = Path(input_name)
    if not input_path.suffix:
        input_path = input_path.with_suffix(QFX_FILE_EXT)
    if not output_name:
        return input_path, input_path.with_suffix(QIF_FILE_EXT)
    output_path = Path(output_name)
    if not output_path.suffix:
        output_path = output_path.with_suffix(QIF_FILE_EXT)
    return input_path, output_path


@logger.catch
def read_base_file(input_file):
    """read_base_file(Pathlib_Object)
    Return the complete contents of input_file as bytes, or None if it can not be read.
    """
    logger.info(f"Attempting to open input file {input_file.name}")
    try:
        with open(input_file, "rb") as IN_FILE:
            file_contents = IN_FILE.read()
    except OSError as e:
        logger.error(f"Error in reading {input_file}")
        logger.warning(str(e))
        return None
    logger.info("File contents read successfully.")
    return file_contents


def write_qif_file(document, output_file, include_memos):
    """write_qif_file(document bytes, Pathlib_Object, include memos flag)
    Return the ConversionResult, or None if output_file can not be opened.
    """
    logger.info(f"Attempting to output to file name: {output_file}")
    try:
        out_file = open(output_file, "w", encoding=DOCUMENT_ENCODING, newline="\n")
    except OSError as e:
        logger.error(f"Error in writing {output_file}")
        logger.warning(str(e))
        return None
    with out_file:
        result = convert(document, include_memos, out_file)
    logger.info(f"File {output_file} contents written successfully.")
    return result


def parse_arguments(argv=None):
    parser = argparse.ArgumentParser(
        prog="qfx2qif",
        description="Convert a QFX (OFX/SGML) bank download to QIF bank format.",
    )
    parser.add_argument(
        "-i", "--input",
        help="input .qfx file. Extension will be added if not provided.",
    )
    parser.add_argument(
        "-o", "--output",
        help="output .qif file. Generated from the input file name if not provided.",
    )
    parser.add_argument("-m", "--memo", action="store_true", help="Include memos.")
    parser.add_argument(
        "-q", "--quiet", action="count", default=0,
        help="Quiet running (or decrease verbosity).",
    )
    parser.add_argument(
        "-v", "--verbose", action="count", default=0, help="Increase verbosity."
    )
    parser.add_argument("--log-dir", default=LOG_DIRECTORY, help="Directory for log files.")
    parser.add_argument(
        "--version", action="version", version=f"%(prog)s Ver {SW_VERSION} {SW_DATE}"
    )
    return parser.parse_args(argv)


@logger.catch
def Main(argv=None):
    args = parse_arguments(argv)
    verbosity = 1 + args.verbose - args.quiet
    defineLoggers(RUNTIME_NAME, verbosity, args.log_dir)
    logger.info("Program Start.")  # log the start of the program
    if not args.input:
        logger.error("Input filename required")
        sys.exit(EXIT_MISSING_INPUT)
    try:
        input_path, output_path = resolve_filenames(args.input, args.output)
    except ValueError as e:
        logger.error("Internal error with file names")
        logger.warning(str(e))
        sys.exit(EXIT_FILENAME_ERROR)

    document = read_base_file(input_path)
    if document is None:
        sys.exit(EXIT_READ_ERROR)
    result = write_qif_file(document, output_path, args.memo)
    if result is None:
        sys.exit(EXIT_WRITE_ERROR)

    logger.info(f"Input File            : {input_path}")
    logger.info(f"Output File           : {output_path}")
    logger.info(f"Number of Transactions: {result.transaction_count}")
    if result.memo_suppressed:
        logger.warning("Memos appear in input file but are excluded from output.")
        logger.warning("Use -m to include memos in output.")
    logger.info("Program End.")
    return EXIT_OK


"""Check if this file is being run directly and activate main function if so.
"""
if __name__ == "__main__":
    sys.exit(Main())
