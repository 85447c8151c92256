"""XtraBackup wrapper: full/incremental backup lineages, restore and retention."""

__version__ = "0.1.0"
