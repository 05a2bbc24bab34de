"""
Prompts for the document assistant.
"""

ASSISTANT_SYSTEM_PROMPT = """You are an intelligent document analysis assistant.
You help users understand documents they have uploaded: summarising them, answering
questions about them, and suggesting what to ask next.

Stay faithful to the document content. If something is not in the document, say so."""

SUMMARY_USER_PROMPT_TEMPLATE = """Please provide a comprehensive summary of the following document.
Focus on the main points, key concepts, and important information.
Keep the summary concise but informative (2-3 paragraphs).

Document content:
{document}"""

ANSWER_USER_PROMPT_TEMPLATE = """Answer the user's question based on the provided document content.

Document content:
{document}
{history}
User question: {question}

Please provide:
1. A direct, accurate answer based on the document content
2. Quote relevant sections from the document to support your answer
3. If the answer is not found in the document, clearly state this
4. Be concise but comprehensive

Respond in a natural, conversational way. Do not use JSON format."""

ANSWER_HISTORY_TEMPLATE = """
Previous conversation context:
{transcript}
"""

QUESTIONS_USER_PROMPT_TEMPLATE = """Based on the following document content, generate {count} relevant questions that someone might ask about this document.
Make the questions specific and answerable from the document content.
Return them as a JSON array of strings.
IMPORTANT: Return ONLY the raw JSON array. DO NOT wrap it in markdown code blocks or any other text.

Document content:
{document}"""

KEY_POINTS_USER_PROMPT_TEMPLATE = """Extract the key points and main topics from the following document.
Return them as a JSON array of strings, with each string being a key point.
Focus on the most important concepts and findings.
IMPORTANT: Return ONLY the raw JSON array. DO NOT wrap it in markdown code blocks or any other text.

Document content:
{document}"""
