"""
Prompt templates for common Chorus workflows.

Each prompt renders a single user message that tells the model which
``chorus_*`` tools to call, in what order, and how to structure the answer.
"""

from __future__ import annotations

from typing import Callable, List

PromptFn = Callable[..., str]

PROMPTS: List[PromptFn] = []


def chorus_prompt(description: str) -> Callable[[PromptFn], PromptFn]:
    def decorator(func: PromptFn) -> PromptFn:
        func.prompt_description = description  # type: ignore[attr-defined]
        PROMPTS.append(func)
        return func

    return decorator


@chorus_prompt(
    "Analyze a recorded sales call for coaching feedback. Examines transcript, "
    "talk-to-listen ratio, trackers, and provides actionable coaching "
    "recommendations."
)
def chorus_call_analysis(conversation_id: str, focus_areas: str = "overall") -> str:
    """
    ``focus_areas`` is a comma-separated list of: discovery,
    objection_handling, closing, rapport, product_knowledge, next_steps,
    overall.
    """
    return f"""Analyze the sales call with conversation ID "{conversation_id}".

Use the following tools in sequence:
1. chorus_get_conversation to get call metadata (participants, duration, date)
2. chorus_get_transcript to get the full transcript
3. chorus_get_conversation_trackers to identify tracker hits (competitors, objections, topics)

Then provide a coaching analysis covering these focus areas: {focus_areas}

Structure your analysis as:
## Call Overview
- Date, duration, participants, call type

## Talk-to-Listen Ratio Analysis
- Estimate from transcript who spoke more, identify longest monologues

## Key Moments
- Important points in the conversation (objections raised, competitors mentioned, pricing discussed)

## Coaching Feedback
For each focus area, provide:
- What went well (with transcript quotes)
- Areas for improvement (with specific suggestions)
- Recommended techniques or frameworks

## Action Items
- Specific next steps for the rep based on this call"""  # noqa: E501


@chorus_prompt(
    "Assess deal risk by analyzing recent conversations with a prospect. "
    "Examines sentiment, competitor mentions, objections, and engagement "
    "patterns."
)
def chorus_deal_risk_assessment(
    participant_email: str, lookback_days: str = "30"
) -> str:
    return f"""Assess deal risk for the prospect with email "{participant_email}" over the last {lookback_days} days.

Use these tools:
1. chorus_list_conversations filtered by participant_email and date range
2. For each recent conversation, use chorus_get_conversation_trackers to find competitor mentions and objections
3. Use chorus_get_transcript for the most recent 2-3 calls to analyze sentiment and tone

Provide a risk assessment structured as:

## Deal Summary
- Number of conversations in period, total engagement time
- Key participants from buyer side

## Risk Signals
Rate each as Low/Medium/High:
- **Competitor Activity**: Are competitors being mentioned? How frequently?
- **Objection Patterns**: Are the same objections recurring without resolution?
- **Engagement Trend**: Is meeting frequency increasing or decreasing?
- **Stakeholder Breadth**: Are we talking to decision-makers or only champions?
- **Sentiment**: Is the buyer tone positive, neutral, or negative?
- **Next Steps Clarity**: Are clear next steps being set and followed through?

## Overall Risk Score
Low / Medium / High with justification

## Recommended Actions
Specific steps to de-risk the deal"""  # noqa: E501


@chorus_prompt(
    "Generate a competitive intelligence report by analyzing competitor "
    "mentions across recent conversations."
)
def chorus_competitive_intelligence(
    competitor_name: str, start_date: str, end_date: str
) -> str:
    name = competitor_name
    return f"""Generate a competitive intelligence report for "{name}" from {start_date} to {end_date}.

Steps:
1. Use chorus_search_conversations to find calls mentioning "{name}"
2. For each relevant call, use chorus_get_conversation_trackers to get context
3. Use chorus_get_transcript for the top 5-10 most relevant calls to extract exact quotes

Report structure:

## Executive Summary
- Total mentions, trend over time, most common contexts

## How Prospects Describe {name}
- Common praise points (with quotes from transcripts)
- Common complaints (with quotes)

## Competitive Positioning
- Where {name} is perceived as stronger
- Where we are perceived as stronger
- Common switching triggers

## Objections Related to {name}
- Most frequent objections when {name} is in the deal
- Successful rebuttals used by our reps (with examples)

## Win/Loss Patterns
- Patterns in deals where {name} was mentioned

## Recommendations
- Messaging adjustments
- Battlecard suggestions
- Training priorities"""  # noqa: E501


@chorus_prompt(
    "Generate a structured meeting summary with key discussion points, "
    "decisions, and action items from a conversation transcript."
)
def chorus_meeting_summary(conversation_id: str) -> str:
    return f"""Create a comprehensive meeting summary for conversation "{conversation_id}".

Use:
1. chorus_get_conversation for metadata
2. chorus_get_transcript for the full transcript
3. chorus_get_conversation_trackers for topic/keyword detection

Structure the summary as:

## Meeting Details
- Date, time, duration
- Participants (with roles if identifiable)
- Meeting type (discovery, demo, negotiation, check-in, etc.)

## Executive Summary
2-3 sentence overview of the meeting

## Key Discussion Points
Numbered list of main topics discussed with brief descriptions

## Decisions Made
Bullet list of any decisions reached during the meeting

## Action Items
For each action item:
- [ ] Description of the task
- **Owner**: Who is responsible (from transcript context)
- **Due**: Any mentioned deadline

## Open Questions
Items that were raised but not resolved

## Follow-Up
Suggested next steps based on the conversation"""  # noqa: E501


@chorus_prompt(
    "Generate a performance review for a sales rep by analyzing their "
    "scorecards, call activity metrics, and conversation patterns."
)
def chorus_rep_performance_review(user_id: str, start_date: str, end_date: str) -> str:
    return f"""Create a performance review for rep with user ID "{user_id}" from {start_date} to {end_date}.

Steps:
1. chorus_get_user to get rep profile and team
2. chorus_list_scorecards filtered by user_id and date range
3. chorus_get_activity_metrics for the rep over the period
4. chorus_list_conversations filtered by the rep and date range
5. For the 2-3 lowest-scored calls, use chorus_get_scorecard for details

Report:

## Rep Profile
- Name, team, role, tenure

## Activity Summary
- Total calls, total duration, average call length
- Week-over-week trends

## Scorecard Analysis
- Average score across all scorecards
- Scores by criteria category
- Trend over time (improving, declining, stable)

## Strengths
- Top-scoring criteria with examples from calls

## Areas for Improvement
- Lowest-scoring criteria with specific examples
- Suggested training resources or playlist moments

## Recommendations
- Specific coaching actions
- Suggested playlists or calls to review
- Goals for next review period"""  # noqa: E501


@chorus_prompt(
    "Aggregate and synthesize customer feedback from conversations for "
    "product teams. Identifies feature requests, pain points, and trending "
    "topics."
)
def chorus_customer_feedback_synthesis(
    topic: str, start_date: str, end_date: str
) -> str:
    """``topic`` is a product area such as 'reporting' or 'onboarding'."""
    return f"""Synthesize customer feedback about "{topic}" from conversations between {start_date} and {end_date}.

Steps:
1. chorus_search_conversations with keyword "{topic}" and date filters
2. For the top 10-15 most relevant conversations, use chorus_get_transcript to extract customer quotes
3. Use chorus_get_conversation_trackers to identify related topics

Report:

## Overview
- Number of conversations mentioning "{topic}"
- Types of customers raising this topic

## Feature Requests
Ranked by frequency:
1. Request description - mentioned N times
   - Representative quotes from customers

## Pain Points
Current frustrations related to {topic}:
1. Pain point - mentioned N times
   - Customer quotes showing impact

## Positive Feedback
What customers appreciate about current {topic} capabilities

## Competitive Context
How customers compare our {topic} to competitors

## Recommendations for Product Team
- Priority 1 items (high frequency, high impact)
- Priority 2 items (moderate frequency or impact)
- Quick wins vs. larger investments"""  # noqa: E501


__all__ = [
    "PROMPTS",
    "chorus_call_analysis",
    "chorus_competitive_intelligence",
    "chorus_customer_feedback_synthesis",
    "chorus_deal_risk_assessment",
    "chorus_meeting_summary",
    "chorus_prompt",
    "chorus_rep_performance_review",
]
