import sys

from mimeflat import parse_message
from mimeflat.tool import summarize_part

# Flatten a raw message saved to disk, e.g. `python main.py message.eml`
with open(sys.argv[1], "rb") as fh:
    parts = parse_message(fh)

for i, part in enumerate(parts):
    print(i, summarize_part(part))

# Gmail works the same way once you have a client `gmail` and a message id `mid`:
#   from mimeflat.tool import fetch_raw_message
#   parts = parse_message(fetch_raw_message(gmail, mid))
