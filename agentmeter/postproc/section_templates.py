"""Standard section bodies inserted by the auto-fixer."""

from __future__ import annotations

from typing import Dict

RESEARCH_DIRECTIVE = (
    "**IMPORTANT**: This agent ONLY creates plans and specifications. "
    "NEVER do the actual implementation. The parent agent will handle all "
    "implementation based on your plan."
)

CONTEXT_STEP = "1. Check .claude/tasks/ for the most recent context_session_*.md file for full context"
CONTEXT7_STEP = "- Use Context7 MCP to get latest documentation for relevant technologies"
SEQUENTIAL_STEP = "- Use Sequential MCP for complex analysis and multi-step reasoning"
OUTPUT_SPEC = (
    "Your final message MUST include the implementation file path you created at "
    ".claude/doc/[agent-name]-[task]-[timestamp].md"
)

STANDARD_SECTIONS: Dict[str, str] = {
    "Goal": """## Goal
Your goal is to [SPECIFIC DOMAIN GOAL]. You specialize in [DOMAIN EXPERTISE] with deep understanding of [KEY TECHNOLOGIES].

""" + RESEARCH_DIRECTIVE,
    "Core Workflow": """## Core Workflow
1. Check .claude/tasks/ for the most recent context_session_*.md file for full context
2. Analyze [DOMAIN-SPECIFIC ANALYSIS]
3. Review existing [RELEVANT FILES/PATTERNS]
4. Check .ai/memory/patterns/ for existing [DOMAIN] patterns
5. Use Context7 MCP to get latest documentation for:
   - [KEY TECHNOLOGY 1]
   - [KEY TECHNOLOGY 2]
   - [DOMAIN-SPECIFIC TOOLS]
6. Use Sequential MCP for complex [DOMAIN] analysis
7. Create detailed implementation plan with examples
8. Save plan to .claude/doc/ in the project directory""",
    "Output Format": """## Output Format
Your final message MUST include the implementation file path you created. No need to recreate the same content again in the final message.

Example: "I've created a detailed [DOMAIN] implementation plan at .claude/doc/[domain]-implementation-[timestamp].md, please read that first before you proceed with implementation.\"""",
    "Rules": """## Rules
- NEVER do the actual implementation or create files directly
- Your goal is to analyze and plan - the parent agent will handle implementation
- Before doing any work, check .claude/tasks/ for any context_session_*.md files
- After finishing work, MUST create the .claude/doc/*.md file in the project directory
- Use Context7 MCP for latest [DOMAIN] documentation
- Use Sequential MCP for complex [DOMAIN] analysis""",
    "Core Competencies": """## Core Competencies for Creating Implementation Plans

1. **[DOMAIN] Analysis**: Break down [DOMAIN] requirements into actionable work

2. **Architecture Planning**: Design [DOMAIN] solutions that fit the existing codebase

3. **Risk Assessment**: Identify [DOMAIN] constraints, edge cases and failure modes

4. **Validation Strategy**: Define how the implementing team verifies the plan""",
    "Planning Approach": """## Planning Approach

When creating [DOMAIN] implementation plans, you will:

1. **Gather Context**: Read the session context and existing [DOMAIN] patterns
2. **Research**: Consult current documentation for [KEY TECHNOLOGIES]
3. **Design**: Outline the components and integration points
4. **Sequence**: Order the work into small, verifiable steps
5. **Document**: Write the plan with examples and acceptance criteria

Your plans prioritize correctness and maintainability.""",
    "Quality Standards": """## Quality Standards

Your implementation plans must include:
- Clear scope and assumptions
- Step-by-step implementation guidance
- Testing and verification procedures
- Rollback considerations
- References to relevant documentation

Always document the [DOMAIN] rationale and provide clear procedures that the implementing team must follow.""",
}

_GENERIC_SECTION = "## {title}\n\n[Section content to be customized]"


def render_section(title: str, domain: str) -> str:
    """Return the standard body for ``title`` with domain placeholders filled in."""
    template = STANDARD_SECTIONS.get(title) or _GENERIC_SECTION.format(title=title)
    replacements = (
        ("[SPECIFIC DOMAIN GOAL]", f"create comprehensive {domain} implementation plans"),
        ("[DOMAIN EXPERTISE]", domain),
        ("[KEY TECHNOLOGIES]", f"modern {domain} technologies and frameworks"),
        ("[DOMAIN-SPECIFIC ANALYSIS]", f"{domain} requirements and constraints"),
        ("[RELEVANT FILES/PATTERNS]", f"{domain} patterns and existing implementations"),
        ("[KEY TECHNOLOGY 1]", f"{domain} frameworks"),
        ("[KEY TECHNOLOGY 2]", f"{domain} best practices"),
        ("[DOMAIN-SPECIFIC TOOLS]", f"{domain} development tools"),
        ("[DOMAIN]", domain),
        ("[domain]", domain.lower().replace(" ", "-")),
    )
    for placeholder, value in replacements:
        template = template.replace(placeholder, value)
    return template


__all__ = [
    "CONTEXT7_STEP",
    "CONTEXT_STEP",
    "OUTPUT_SPEC",
    "RESEARCH_DIRECTIVE",
    "SEQUENTIAL_STEP",
    "STANDARD_SECTIONS",
    "render_section",
]
