"""Helper utilities for constructing temporary template corpora in tests."""

from __future__ import annotations

import textwrap
from pathlib import Path
from typing import List, Mapping

from agentmeter.corpus import CorpusScanner

COMPLETE_AGENT = """\
---
name: API Specialist
description: Use this agent PROACTIVELY when planning API work.
model: sonnet
color: "#2196F3"
Examples:
  - Design a REST API for orders
  - Plan pagination for list endpoints
  - Review the error handling strategy
---

## Goal
Your goal is to plan API changes. This agent ONLY creates plans. NEVER do the actual implementation.

## Core Workflow
1. Check .claude/tasks/ for the most recent context_session_*.md file
2. Use Context7 MCP to get latest framework documentation
3. Use Sequential MCP for complex analysis
4. Consult mcp-catalog for available tools
5. Save the plan to .claude/doc/api-plan-[timestamp].md

## Output Format
Return the path of the saved plan.

## Rules
- Plan only

## Core Competencies
- REST design

## Planning Approach
- Gather context first

## Quality Standards
- Every plan lists risks
"""

MINIMAL_AGENT = """\
---
name: x
description: "..."
---

## Goal
"""


class CorpusBuilder:
    """Writes markdown documents into a throwaway project root."""

    def __init__(self, tmp_path: Path) -> None:
        self.root = tmp_path / "project"
        self.root.mkdir()
        self._scanner = CorpusScanner()

    def write(self, files: Mapping[str, str]) -> List[Path]:
        """Write `path -> contents` entries and return the written paths."""
        written: List[Path] = []
        for relative, content in files.items():
            path = self.root / relative
            path.parent.mkdir(parents=True, exist_ok=True)
            normalised = textwrap.dedent(content).lstrip("\n")
            path.write_text(normalised, encoding="utf-8")
            written.append(path)
        return written

    def agent(self, name: str, content: str = COMPLETE_AGENT, *, kind: str = "specialists") -> Path:
        """Write one agent document under Examples/agents/<kind>/."""
        return self.write({f"Examples/agents/{kind}/{name}.md": content})[0]

    def scan(self) -> List[Path]:
        return self._scanner.scan(self.root)

    def path(self) -> Path:
        return self.root


__all__ = ["COMPLETE_AGENT", "CorpusBuilder", "MINIMAL_AGENT"]
