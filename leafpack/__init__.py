"""Read, build and inspect PFS0/NSP packages, content meta records and related formats."""

__version__ = "0.1.0"
__all__ = ["amiibo", "builder", "cnmt", "formatting", "nspinfo", "pfs0", "titles"]