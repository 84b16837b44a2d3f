from lumedit.export.ies_writer import generate_ies_text

__all__ = ["generate_ies_text"]
