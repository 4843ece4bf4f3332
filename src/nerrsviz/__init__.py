try:
    from ._version import version as __version__  # written by setuptools-scm at build time
except Exception:
    from importlib.metadata import version, PackageNotFoundError
    try:
        __version__ = version("nerrs-viz")
    except PackageNotFoundError:
        __version__ = "0+unknown"
