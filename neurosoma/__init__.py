"""NeuroSoma: breathwork education parsing and deterministic practice planning."""

from dotenv import load_dotenv

load_dotenv()

__version__ = "0.1.0"
