"""atuin-fzf: browse atuin shell history with fzf."""

__version__ = "0.1.0"
