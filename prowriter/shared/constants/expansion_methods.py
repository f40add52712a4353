"""内置扩写方法（章节扩写策略模板）。"""

from prowriter.domain.article import ExpansionMethod, MethodCategory

BUILTIN_EXPANSION_METHODS: tuple[ExpansionMethod, ...] = (
    ExpansionMethod(
        id="swot-analysis",
        name="SWOT Analysis",
        category=MethodCategory.ANALYSIS,
        description="Strengths, weaknesses, opportunities and threats of the subject.",
        instruction=(
            "Structure the section as a SWOT analysis: one sub-heading each for strengths, "
            "weaknesses, opportunities and threats, with concrete examples under each."
        ),
        builtin=True,
    ),
    ExpansionMethod(
        id="root-cause",
        name="Root Cause Analysis",
        category=MethodCategory.ANALYSIS,
        description="Trace the problem back to its underlying causes.",
        instruction=(
            "Identify the visible problem first, then work backwards through its direct and "
            "structural causes. End with the one cause that would unlock the most change."
        ),
        builtin=True,
    ),
    ExpansionMethod(
        id="case-study",
        name="Case Study",
        category=MethodCategory.NARRATIVE,
        description="Anchor the section in one real-world example.",
        instruction=(
            "Open with a concrete real-world case, describe what happened and why, "
            "then extract the general lessons for the reader."
        ),
        builtin=True,
    ),
    ExpansionMethod(
        id="storytelling",
        name="Storytelling",
        category=MethodCategory.NARRATIVE,
        description="Narrative arc with a protagonist, conflict and resolution.",
        instruction=(
            "Write the section as a short narrative: introduce a protagonist, the challenge "
            "they face and how it is resolved, keeping the facts accurate."
        ),
        builtin=True,
    ),
    ExpansionMethod(
        id="action-roadmap",
        name="Action Roadmap",
        category=MethodCategory.STRATEGIC,
        description="Short, medium and long term steps.",
        instruction=(
            "Present a practical roadmap split into short-term, medium-term and long-term "
            "actions, naming who should act and how success is measured."
        ),
        builtin=True,
    ),
    ExpansionMethod(
        id="policy-recommendations",
        name="Policy Recommendations",
        category=MethodCategory.STRATEGIC,
        description="Numbered recommendations for decision makers.",
        instruction=(
            "Conclude the section with numbered, specific recommendations for decision makers, "
            "each with its expected impact and main risk."
        ),
        builtin=True,
    ),
    ExpansionMethod(
        id="data-driven",
        name="Data Driven",
        category=MethodCategory.DATA,
        description="Lead with figures, indicators and trends.",
        instruction=(
            "Support every claim with indicators, figures or trends, cite the type of source "
            "for each figure and include one comparison table in Markdown."
        ),
        builtin=True,
    ),
    ExpansionMethod(
        id="comparative",
        name="Comparative Benchmark",
        category=MethodCategory.DATA,
        description="Compare against peers or international benchmarks.",
        instruction=(
            "Compare the subject with two or three relevant peers or international benchmarks "
            "and explain the gaps the numbers reveal."
        ),
        builtin=True,
    ),
    ExpansionMethod(
        id="historical-context",
        name="Historical Context",
        category=MethodCategory.CONTEXT,
        description="Explain how we got here.",
        instruction=(
            "Give the historical background of the subject in chronological order and show "
            "how past decisions shape the present situation."
        ),
        builtin=True,
    ),
    ExpansionMethod(
        id="stakeholder-map",
        name="Stakeholder Map",
        category=MethodCategory.CONTEXT,
        description="Who is involved and what each party wants.",
        instruction=(
            "Map the main stakeholders, their interests and their influence, and point out "
            "where interests align or conflict."
        ),
        builtin=True,
    ),
)
