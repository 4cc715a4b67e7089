"""
PlantDiary.

Watches a directory of time-stamped plant photos, writes a short observation
diary entry for each new photo with a generative model, and stores the entries
for later browsing.
"""
import logging

# Applications using this package should configure their own logging.
logging.getLogger(__name__).addHandler(logging.NullHandler())

VERSION = "0.1.0"
