# Configuration file for the Sphinx documentation builder.
#
# https://www.sphinx-doc.org/en/master/usage/configuration.html

import os
import sys

# -- Path setup --------------------------------------------------------------
sys.path.insert(0, os.path.abspath("../.."))

# -- Project information -----------------------------------------------------
project = "specrules"
copyright = "2025, specrules contributors"
author = "specrules contributors"

# -- General configuration ---------------------------------------------------
extensions = [
    "sphinx.ext.autodoc",
    "sphinx.ext.napoleon",
    "sphinx.ext.viewcode",
    "sphinx.ext.intersphinx",
    "sphinxcontrib.mermaid",
    "sphinx_immaterial",
]

templates_path = ["_templates"]
exclude_patterns: list[str] = []

# -- Options for HTML output -------------------------------------------------
html_theme = "sphinx_immaterial"
html_static_path: list[str] = []

html_theme_options = {
    "font": False,
    "features": [
        "search.suggest",
        "search.highlight",
        "navigation.top",
        "toc.follow",
    ],
}

# -- Extension configuration -------------------------------------------------

# Google style docstrings throughout
napoleon_google_docstring = True
napoleon_numpy_docstring = False
napoleon_include_init_with_doc = True

autodoc_default_options = {
    "members": True,
    "member-order": "bysource",
    "exclude-members": "__weakref__, model_config",
}
autodoc_typehints = "description"
# The web and demo modules need the optional extras.
autodoc_mock_imports = ["fastapi", "starlette", "uvicorn"]

intersphinx_mapping = {
    "python": ("https://docs.python.org/3", None),
    "pydantic": ("https://docs.pydantic.dev/latest", None),
}
