"""Common literal values used across bookpress.

These constants keep filenames and prefixes centralized so the publisher,
assembler and tests can import the same values without drifting.

Examples
--------
>>> from bookpress import _constants
>>> _constants.PUBLISH_META_TEMPLATE.format(edition="print")
'.bookpress-print-meta.json'
>>> _constants.SCRATCH_PREFIX
'bookpress_pdf_'
"""

PUBLISH_META_TEMPLATE = ".bookpress-{edition}-meta.json"
SCRATCH_PREFIX = "bookpress_pdf_"
CUSTOM_STYLESHEET = "style.css"
