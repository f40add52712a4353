"""发布元数据生成提示词定义。"""

SCOPE_PUBLISH_METADATA = "metadata:publish"

PROMPTS = {
    SCOPE_PUBLISH_METADATA: {
        "description": "根据全文生成 SEO/发布元数据（JSON 输出）",
        "messages": [
            {
                "role": "system",
                "content": "You are a helpful AI assistant that outputs JSON only.",
            },
            {
                "role": "user",
                "content": """{system_instruction}

Analyze the following article (written in {language}).

Article title: "{topic}"

Article content:
\"\"\"
{article_text}
\"\"\"

{articles_context}

{categories_context}

Produce the following data precisely, as JSON only:
1. slug: a short English, SEO friendly URL slug.
2. suggestedCategories: array of strings. Suggest {categories_count} suitable categories.
3. titles: array of strings. Generate {titles_count} compelling titles. {titles_instruction}
4. keywords: array of strings. Generate {keywords_count} strong search keywords.
5. teasers: array of strings. Generate exactly {teasers_count} teaser texts, each following these rules in order:
{teaser_rules}
6. linkingSuggestions: array of objects (title, url). Suggest {linking_count} articles from the list above to link to. If there are not enough, suggest closely related topics.
7. sources: array of strings. Suggest {sources_count} strong research papers, academic studies or highly reliable reports on the topic, formatted in APA.

Example JSON structure:
{{
  "slug": "example-slug",
  "suggestedCategories": ["cat1", "cat2"],
  "titles": ["title1", "title2"],
  "keywords": ["kw1", "kw2"],
  "teasers": ["teaser1", "teaser2"],
  "linkingSuggestions": [{{"title": "t", "url": "u"}}],
  "sources": ["source1"]
}}""",
            },
        ],
    },
}
