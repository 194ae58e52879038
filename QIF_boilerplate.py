""" this file defines the boilerplate parts of the QFX input and the QIF output.
It should be imported into a program for converting QFX downloads to QIF files.
"""

SW_VERSION = "1.01"
SW_DATE = "2025-11-28"

# files to be converted
QFX_FILE_EXT = ".qfx"
QIF_FILE_EXT = ".qif"

# every field value is cut to this many characters (silently)
MAX_FIELD_LENGTH = 4095

# qfx transaction markers, searched without regard to case
qfx_xact_start = "<STMTTRN"  # may carry attributes before the closing '>'
qfx_xact_end = "</STMTTRN>"
qfx_tag_open = "<"

# tags pulled out of every transaction block
qfx_xact_date = "DTPOSTED"  # YYYYMMDD followed by an optional time of day
qfx_xact_amount = "TRNAMT"  # signed decimal, thousands commas tolerated
qfx_xact_name = "NAME"
qfx_xact_memo = "MEMO"

sample_qfx_statement_format = """
<STMTTRN>
<TRNTYPE>DEBIT
<DTPOSTED>20181210120000
<TRNAMT>-490
<FITID>12102018-490AC-BANK OF AMERICA
<NAME>BANK OF AMERICA -ONLINE PMT
<MEMO>BANK OF AMERICA -ONLINE PMT
</STMTTRN>
"""

# qif file boilerplate
qif_file_header = "!Type:Bank\n"
qif_xact_date = "D"  # MM/DD/YYYY
qif_xact_name = "P"
qif_xact_memo = "M"  # only written when memos are requested
qif_xact_amount = "T"  # commas removed
qif_xact_cleared = "C*"
qif_xact_end = "^"
qif_unknown_name = "(unknown)"
