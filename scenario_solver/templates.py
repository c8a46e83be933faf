"""Built-in scenario-solver questions.

Content is kept in the same camelCase shape the course builder stores
inside a lesson document, and goes through `load_graph` at import so a
broken template fails loudly instead of mid-attempt.
"""

from __future__ import annotations

from typing import Dict, List, Optional

from .graph import ScenarioGraph, load_graph

_TEMPLATES: Dict[str, ScenarioGraph] = {}


def _register(template_id: str, content: dict) -> None:
    _TEMPLATES[template_id] = load_graph(content)


_register(
    "delayed-order",
    {
        "title": "Frustrated Customer: Delayed Order",
        "description": "Handle a call from a customer whose express birthday gift has not arrived.",
        # Best path: opt-1d (35) + opt-2g (35)
        "perfectScore": 70,
        "startStepId": "step-1",
        "steps": [
            {
                "id": "step-1",
                "situation": "First contact",
                "context": (
                    "Ana ordered a birthday gift five days ago with 2-day express shipping. "
                    "The birthday is today and the package has not arrived. She is clearly upset."
                ),
                "options": [
                    {
                        "id": "opt-1a",
                        "text": "\"Let me check your order right away. I understand how frustrating this must be.\"",
                        "consequence": "Ana sighs with relief: \"Thanks, at least someone is listening.\"",
                        "isCorrect": True,
                        "score": 30,
                        "nextStepId": "step-2-good",
                    },
                    {
                        "id": "opt-1b",
                        "text": "\"Our system says it's in transit. Delays happen sometimes.\"",
                        "consequence": "\"I paid extra for express!\" Her tone turns hostile.",
                        "isCorrect": False,
                        "score": -10,
                        "nextStepId": "step-2-bad",
                    },
                    {
                        "id": "opt-1c",
                        "text": "\"You'll need to contact the courier, we only dispatch. Here is their number.\"",
                        "consequence": "Ana demands a supervisor: \"You charged me, you are responsible!\"",
                        "isCorrect": False,
                        "score": -20,
                        "nextStepId": "step-2-escalated",
                    },
                    {
                        "id": "opt-1d",
                        "text": "\"I'm very sorry. Could I have your order number? I'll track it live with you.\"",
                        "consequence": "Ana calms down noticeably and reads out the order number.",
                        "isCorrect": True,
                        "score": 35,
                        "nextStepId": "step-2-excellent",
                    },
                ],
            },
            {
                "id": "step-2-good",
                "situation": "Investigating the problem",
                "context": (
                    "The courier marked the address as wrong and returned the parcel to the depot. "
                    "It will now arrive two days late."
                ),
                "options": [
                    {
                        "id": "opt-2a",
                        "text": "\"The courier made an address error. I can resend it, it'll take two days.\"",
                        "consequence": "\"Two days? The birthday is TODAY!\" She feels left on her own.",
                        "isCorrect": False,
                        "score": 0,
                    },
                    {
                        "id": "opt-2b",
                        "text": "\"I can offer a full refund, or a free urgent resend plus a voucher.\"",
                        "consequence": "Ana accepts the voucher, but is not fully satisfied.",
                        "isCorrect": True,
                        "score": 20,
                    },
                    {
                        "id": "opt-2c",
                        "text": "\"I'll refund you in full, resend at no cost, and add a voucher. Does that help?\"",
                        "consequence": "\"Wow, I didn't expect that.\" Her tone turns positive.",
                        "isCorrect": True,
                        "score": 35,
                    },
                ],
            },
            {
                "id": "step-2-bad",
                "situation": "Customer increasingly upset",
                "context": "Ana is raising her voice: \"I don't want excuses, I want my order TODAY!\"",
                "options": [
                    {
                        "id": "opt-2d",
                        "text": "\"Please lower your voice, I'm trying to help.\"",
                        "consequence": "\"Don't tell me how to talk! Get your supervisor.\" Fully escalated.",
                        "isCorrect": False,
                        "score": -10,
                    },
                    {
                        "id": "opt-2e",
                        "text": "\"You're right to be upset. Let me see what immediate options we have.\"",
                        "consequence": "Ana pauses: \"Okay... thanks for understanding.\"",
                        "isCorrect": True,
                        "score": 15,
                    },
                ],
            },
            {
                "id": "step-2-escalated",
                "situation": "Damage control: escalation",
                "context": "A supervisor joins the call. Ana repeats that she was passed around.",
                "options": [
                    {
                        "id": "opt-2f",
                        "text": "\"I apologise for redirecting you. I'll own this until it is resolved.\"",
                        "consequence": "The supervisor nods; Ana is still wary but willing to continue.",
                        "isCorrect": False,
                        "score": 10,
                    },
                ],
            },
            {
                "id": "step-2-excellent",
                "situation": "Tracking in real time",
                "context": "The tracker shows the parcel at the local depot, 8 km away.",
                "isEndpoint": True,
                "options": [
                    {
                        "id": "opt-2g",
                        "text": "\"It's at our local depot. I'll arrange same-day delivery and cover the cost.\"",
                        "consequence": "Ana is delighted: the gift will arrive in time for the party.",
                        "isCorrect": True,
                        "score": 35,
                    },
                    {
                        "id": "opt-2h",
                        "text": "\"It's nearby, so it should arrive tomorrow at the latest.\"",
                        "consequence": "\"Tomorrow is too late.\" Ana hangs up disappointed.",
                        "isCorrect": False,
                        "score": 10,
                    },
                ],
            },
        ],
    },
)

_register(
    "suspicious-invoice",
    {
        "title": "Suspicious Supplier Invoice",
        "description": "A supplier emails new bank details the day a large invoice is due.",
        "perfectScore": 50,
        "passRatio": 0.6,
        "startStepId": "email",
        "steps": [
            {
                "id": "email",
                "situation": "Urgent change of bank details",
                "context": "The email comes from a lookalike domain and asks you to pay today.",
                "options": [
                    {
                        "id": "pay-now",
                        "text": "Update the details and pay to avoid late fees.",
                        "consequence": "The payment went to a fraudster's account.",
                        "isCorrect": False,
                        "score": -20,
                    },
                    {
                        "id": "call-supplier",
                        "text": "Call the supplier on the number already on file.",
                        "consequence": "The supplier confirms they never changed their bank details.",
                        "isCorrect": True,
                        "score": 30,
                        "nextStepId": "report",
                    },
                    {
                        "id": "reply-email",
                        "text": "Reply to the email asking for confirmation.",
                        "consequence": "The attacker happily confirms the new details.",
                        "isCorrect": False,
                        "score": 0,
                        "nextStepId": "report",
                    },
                ],
            },
            {
                "id": "report",
                "situation": "What now?",
                "options": [
                    {
                        "id": "report-security",
                        "text": "Forward the email to the security team and flag the supplier record.",
                        "consequence": "Security blocks the domain company-wide.",
                        "isCorrect": True,
                        "score": 20,
                    },
                    {
                        "id": "delete",
                        "text": "Delete the email and move on.",
                        "consequence": "A colleague receives the same email next week.",
                        "isCorrect": False,
                        "score": 0,
                    },
                ],
            },
        ],
    },
)


def get_all_summaries() -> List[dict]:
    """Return lightweight summaries for listing."""
    return [
        {
            "id": template_id,
            "title": graph.title,
            "description": graph.description,
            "step_count": len(graph.steps),
            "perfect_score": graph.perfect_score,
        }
        for template_id, graph in _TEMPLATES.items()
    ]


def load_template(template_id: str) -> Optional[ScenarioGraph]:
    """Return the validated graph for a given id."""
    return _TEMPLATES.get(template_id)
