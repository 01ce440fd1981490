"""
Default values, to be imported elsewhere in cronsync code

Do NOT, import any cronsync modules (cronsync.utils, cronsync.config, etc.)
into this file, as this may result in circular imports.
"""
