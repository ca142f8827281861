from .selector import Chooser, describe, format_candidate, prompt_chooser, select

__all__ = ["Chooser", "describe", "format_candidate", "prompt_chooser", "select"]
