"""大纲与章节生成提示词定义。"""

SCOPE_GENERATE_OUTLINE = "generation:outline"
SCOPE_GENERATE_SECTION = "generation:section"

NO_INSTRUCTION_FALLBACK = "No specific guidance. Rely on your professional expertise."

PROMPTS = {
    SCOPE_GENERATE_OUTLINE: {
        "description": "按主题生成文章大纲（固定数量的章节标题，JSON 输出）",
        "messages": [
            {
                "role": "system",
                "content": """You are a senior editor and subject-matter consultant who designs the structure of professional long-form articles.
Write the outline in {language}. Titles must be sober, concrete and practical.
The result MUST be a JSON object with a single key "titles" whose value is an array of exactly {section_count} strings.
Example: {{"titles": ["Title 1", "Title 2"]}}""",
            },
            {
                "role": "user",
                "content": """Create a detailed, professional article structure for the topic: "{topic}".
Give me {section_count} section titles as a JSON object.""",
            },
        ],
    },
    SCOPE_GENERATE_SECTION: {
        "description": "按章节标题与扩写策略生成章节正文（Markdown）",
        "messages": [
            {
                "role": "system",
                "content": """You are an editor-in-chief and professional journalist.
Writing requirements:
1. Write a comprehensive, authoritative draft of THIS SECTION ONLY, in {language}.
2. Keep an academic and professional tone.
3. Use Markdown for formatting (sub-headings, lists, bullet points).
4. Focus on adding real value and practical solutions.
5. Avoid filler and long introductions; get to the point immediately.""",
            },
            {
                "role": "user",
                "content": """Overall article topic: {topic}
Title of this section: {title}

Context and additional instructions:
{instruction}

If the context above contains a "strategy" or structural directives, follow them precisely.""",
            },
        ],
    },
}
