extensions = [
    'sphinx.ext.autodoc',
    'jaraco.packaging.sphinx',
]

master_doc = "index"
html_theme = "furo"

# Be strict about any broken references
nitpicky = True

# Include Python intersphinx mapping to prevent failures
extensions += ['sphinx.ext.intersphinx']
intersphinx_mapping = {
    'python': ('https://docs.python.org/3', None),
}

# Preserve authored syntax for defaults
autodoc_preserve_defaults = True

extensions += ['sphinx.ext.viewcode']

for dependency in 'jaraco.text jaraco.collections'.split():
    rtd_name = dependency.replace('.', '')
    url = f'https://{rtd_name}.readthedocs.io/en/latest'
    intersphinx_mapping.update({dependency: (url, None)})
