"""Common literal values used across quire.

These constants keep file extensions, template names, and stylesheet paths
centralized so the loader, the compositor, the writer, and the tests import
the same values without drifting. Intended for internal use within the quire
package.

Examples
--------
>>> from quire import _constants
>>> _constants.OUTPUT_SUFFIX
'.html'
>>> ".md" in _constants.DEFAULT_CONTENT_EXTENSIONS
True
"""

DEFAULT_CONTENT_EXTENSIONS = (".md", ".markdown")
INDEX_STEM = "index"
OUTPUT_SUFFIX = ".html"
SITE_INDEX_OUTPUT = "index.html"

PAGE_TEMPLATE = "page.jinja"
INDEX_TEMPLATE = "index.jinja"

PYGMENTS_STYLESHEET = "css/pygments.css"
CUSTOM_STYLESHEET = "css/custom.css"
STYLESHEETS = (CUSTOM_STYLESHEET, PYGMENTS_STYLESHEET)
