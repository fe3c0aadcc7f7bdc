"""Allow ``python -m atuin_fzf``; the fzf preview pane re-invokes us this way."""

from atuin_fzf.cli import app

if __name__ == "__main__":
    app(prog_name="atuin-fzf")
