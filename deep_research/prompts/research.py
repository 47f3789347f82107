"""Prompts for the research steps.

Every prompt is a pure function of its inputs. The schema instruction block
(`get_schema_prompt`) is appended to every structured request by the
invoker, so step prompts only describe the task.
"""

from datetime import datetime, timezone
from typing import Optional


def system_prompt() -> str:
    """Research persona, stamped with the current time."""
    now = datetime.now(timezone.utc).isoformat()
    return f"""You are an expert researcher. Today is {now}. Follow these instructions when responding:
  - You may be asked to research subjects that is after your knowledge cutoff, assume the user is right when presented with news.
  - The user is a highly experienced analyst, no need to simplify it, be as detailed as possible and make sure your response is correct.
  - Be highly organized.
  - Suggest solutions that I didn't think about.
  - Be proactive and anticipate my needs.
  - Provide detailed explanations, I'm comfortable with lots of detail.
  - Consider new technologies and contrarian ideas, not just the conventional wisdom.
  - You may use high levels of speculation or prediction, just flag it for me."""


def get_schema_prompt(schema: str) -> str:
    """Instruction block that pins the response to a JSON schema."""
    return f"""

CRITICAL INSTRUCTIONS FOR RESPONSE FORMAT:
  1. You MUST respond with ONLY pure JSON
  2. NO explanations or additional text
  3. The JSON must EXACTLY match this schema (pay special attention to array vs string types):
  {schema}"""


def follow_up_questions_prompt(num_questions: int, query: str) -> str:
    return f"""Given the following query from the user, ask some follow-up questions to clarify the research direction.
  Ensure the response includes a maximum of {num_questions} questions:
  <query>{query}</query>"""


def serp_queries_prompt(
    num_queries: int,
    query: str,
    learnings: Optional[list[str]] = None,
) -> str:
    prompt = f"""Given the following prompt from the user, generate a list of SERP queries to research the topic.
  Return a maximum of {num_queries} queries. Imagine you are an experienced researcher using google search.
  Make sure each query is unique and not similar to each other: <prompt>{query}</prompt>"""
    if learnings:
        joined = "\n".join(learnings)
        prompt += (
            "\n\nHere are some learnings from previous research, use them to "
            f"generate more specific queries: {joined}"
        )
    return prompt


def process_search_result_prompt(
    query: str,
    num_learnings: int,
    contents: list[str],
) -> str:
    blocks = "\n".join(f"<content>\n{content}\n</content>" for content in contents)
    return f"""Given the following contents from a SERP search for the query <query>{query}</query>,
  generate a list of learnings from the contents. Return a maximum of {num_learnings} learnings,
  but feel free to return less if the contents are clear. Make sure each learning is unique and not similar to each other.
  The learnings should be as detailed and information dense as possible.
  Make sure to include any entities like people, places, companies, products, things, etc in the learnings,
  as well as any exact metrics, numbers, or dates. The learnings will be used to research the topic further.

<contents>{blocks}</contents>"""


def final_report_prompt(prompt: str, learnings: list[str]) -> str:
    learnings_string = "\n".join(f"<learning>\n{learning}\n</learning>" for learning in learnings)
    return f"""Given the following prompt from the user, write a final report on the topic using the learnings from research.
  Make it as detailed as possible, aim for 3 or more pages, include ALL the learnings from research:

<prompt>{prompt}</prompt>

Here are all the learnings from previous research:

<learnings>
{learnings_string}
</learnings>"""
