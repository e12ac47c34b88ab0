"""Claude Code templates."""

CLAUDE_MD = """# CLAUDE.md

This file gives Claude Code guidance when working with code in this
repository. It was generated by `reforge init` (specforge workflow).

## Workflow

This project follows a specification-driven workflow:

1. The developer writes or updates a specification under `specs/`.
2. Claude Code reads the specification and proposes an implementation plan.
3. The developer reviews the plan before any code is written.
4. Claude Code implements the plan in small, reviewable commits.
5. The developer reviews the diff and merges.

## Ground rules

- Read the relevant specification before changing code.
- Keep changes scoped to the task at hand; do not refactor unrelated code.
- Run the test suite before declaring a task complete.
- Never commit secrets, credentials or generated artifacts.
- When a requirement is ambiguous, stop and ask instead of guessing.

## Project commands

Document the build, test and lint commands for this project here so
Claude Code can run them without guessing.

```bash
# build
# test
# lint
```
"""

README_MD = """# Claude Code Configuration

This directory was initialized with `reforge init --agent claude`.

## Files

| File | Purpose |
|------|---------|
| `.reforge.json` | Agent selection and installed template packages |
| `CLAUDE.md` | Project instructions loaded by Claude Code |
| `README.md` | This file |

## Setup Instructions

1. Install Claude Code: `npm install -g @anthropic-ai/claude-code`
2. Run `claude` from the project root; `CLAUDE.md` is picked up automatically.
3. Fill in the *Project commands* section of `CLAUDE.md`.
4. Commit `.reforge.json` and `CLAUDE.md` so the whole team shares them.

## Updating

Re-run `reforge init --agent claude --force` to refresh the templates.
Local edits to `CLAUDE.md` and `README.md` are overwritten.
"""

TEMPLATE_FILES = {
    "CLAUDE.md": CLAUDE_MD,
    "README.md": README_MD,
}
