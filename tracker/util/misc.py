import re
from datetime import datetime

# hh:mm:ss, mm:ss or ss, one or two digits per field.
_TIME_INPUT = re.compile(r"([0-9]{1,2}:)?([0-9]{1,2}:)?[0-9]{1,2}")


# Simply returns the current local time as an aware datetime.
def now_local():
    return datetime.now().astimezone()


# Format elapsed seconds as HH:MM:SS. Negative values clamp to zero, hours are allowed to run past 99.
def format_time(seconds):
    seconds = max(0, int(seconds))
    h, rem = divmod(seconds, 3600)
    m, s = divmod(rem, 60)
    return f"{h:02d}:{m:02d}:{s:02d}"


# Parses user time input from the edit dialog into seconds. Returns None for anything that isn't
# ss, mm:ss or hh:mm:ss, so the caller can keep the previous value.
def parse_time_input(text):
    if text is None:
        return None
    text = text.strip()
    if not _TIME_INPUT.fullmatch(text):
        return None
    seconds = 0
    for multiplier, part in zip((1, 60, 3600), reversed(text.split(":"))):
        seconds += int(part) * multiplier
    return seconds
