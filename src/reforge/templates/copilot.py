"""GitHub Copilot templates."""

CLAUDE_MD = """# CLAUDE.md

Agent instructions for GitHub Copilot, generated by `reforge init`
(specforge workflow). Copilot Chat and the Copilot coding agent read this
file as repository context.

## Workflow

1. Write or update the specification for the change under `specs/`.
2. Ask GitHub Copilot to draft the implementation against the specification.
3. Review every suggestion before accepting it.
4. Keep commits small and reference the specification they implement.

## Ground rules

- Prefer existing project patterns over new abstractions.
- Keep suggestions scoped to the file and task being edited.
- Add or update tests alongside behavior changes.
- Never accept suggestions that include secrets or credentials.

## Project commands

```bash
# build
# test
# lint
```
"""

README_MD = """# GitHub Copilot Configuration

This directory was initialized with `reforge init --agent copilot`.

## Files

| File | Purpose |
|------|---------|
| `.reforge.json` | Agent selection and installed template packages |
| `CLAUDE.md` | Agent instructions shared with GitHub Copilot |
| `README.md` | This file |

## Setup Instructions

1. Install the GitHub Copilot extension for your editor.
2. Sign in with a GitHub account that has Copilot access.
3. Enable Copilot Chat and point it at `CLAUDE.md` for repository context.
4. Commit `.reforge.json` and `CLAUDE.md` so the whole team shares them.

## Updating

Re-run `reforge init --agent copilot --force` to refresh the templates.
Local edits to `CLAUDE.md` and `README.md` are overwritten.
"""

TEMPLATE_FILES = {
    "CLAUDE.md": CLAUDE_MD,
    "README.md": README_MD,
}
