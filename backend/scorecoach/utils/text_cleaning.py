import re

_SMART_QUOTES = {
    "“": '"', "”": '"',
    "‘": "'", "’": "'",
    " ": " ", " ": " ", " ": " ",
}


def clean_report_text(raw_text):
    """
    Normalize text pasted or OCR'd from a score report, line by line:
    unify line endings, replace smart quotes and odd spaces, collapse runs of
    spaces/tabs, drop blank lines. Line structure is kept because question
    rows are matched one line at a time.
    """
    if not raw_text:
        return ""

    text = raw_text.replace("\r\n", "\n").replace("\r", "\n")
    for src, dst in _SMART_QUOTES.items():
        text = text.replace(src, dst)

    cleaned_lines = []
    for line in text.split("\n"):
        line = re.sub(r"[ \t\f\v]+", " ", line).strip()
        if line:
            cleaned_lines.append(line)

    return "\n".join(cleaned_lines)
