# -*- coding: utf-8 -*-
"""Utility modules."""

from panel_relay.utils.cookies import document_cookie_script, parse_set_cookie
from panel_relay.utils.json_path import as_float, as_str, as_uint, dig, extract_id
from panel_relay.utils.validation import is_http_url, mask_secret

__all__ = [
    "as_float",
    "as_str",
    "as_uint",
    "dig",
    "document_cookie_script",
    "extract_id",
    "is_http_url",
    "mask_secret",
    "parse_set_cookie",
]
