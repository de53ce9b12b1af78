# perception_survey/data/activity_catalog.py
from enum import IntEnum
from typing import Dict, List, Any


# =====================================================================
# ENUMS
# =====================================================================

class PillarType(IntEnum):
    """Four pillars of client service."""
    CONTENT_COMMUNICATION = 1
    MARKETING_PROMOTION = 2
    PROACTIVE_OUTREACH = 3
    ONGOING_RELATIONSHIP = 4


PILLAR_NAMES: Dict[int, str] = {
    PillarType.CONTENT_COMMUNICATION: "Content & Communication",
    PillarType.MARKETING_PROMOTION: "Marketing & Promotion",
    PillarType.PROACTIVE_OUTREACH: "Proactive Outreach",
    PillarType.ONGOING_RELATIONSHIP: "Ongoing Relationship",
}

DEFAULT_PILLAR = PillarType.CONTENT_COMMUNICATION


def pillar_name(pillar: int) -> str:
    """Display name of a pillar, with a generic label for unknown ids."""
    return PILLAR_NAMES.get(pillar, f"Pillar {pillar}")


# =====================================================================
# DEFAULT ACTIVITY CATALOG
# =====================================================================

_CATALOG: List[Dict[str, Any]] = [
    # CONTENT & COMMUNICATION
    {"pillar": PillarType.CONTENT_COMMUNICATION, "name": "Monthly Newsletter", "description": "A monthly email roundup of market news and practical tips"},
    {"pillar": PillarType.CONTENT_COMMUNICATION, "name": "Market Update Reports", "description": "Quarterly reports on local pricing and inventory trends"},
    {"pillar": PillarType.CONTENT_COMMUNICATION, "name": "Educational Blog Posts", "description": "Articles explaining processes, terms and common decisions"},
    {"pillar": PillarType.CONTENT_COMMUNICATION, "name": "Video Walkthroughs", "description": "Short videos that explain a topic or tour a property"},
    {"pillar": PillarType.CONTENT_COMMUNICATION, "name": "Status Update Emails", "description": "Regular written updates while a transaction is in progress"},
    {"pillar": PillarType.CONTENT_COMMUNICATION, "name": "Resource Guides", "description": "Downloadable checklists and guides for each stage of the process"},

    # MARKETING & PROMOTION
    {"pillar": PillarType.MARKETING_PROMOTION, "name": "Social Media Features", "description": "Spotlighting your business or listing on our social channels"},
    {"pillar": PillarType.MARKETING_PROMOTION, "name": "Professional Photography", "description": "Photography sessions arranged and paid for by us"},
    {"pillar": PillarType.MARKETING_PROMOTION, "name": "Targeted Online Ads", "description": "Paid advertising aimed at the right audience"},
    {"pillar": PillarType.MARKETING_PROMOTION, "name": "Printed Brochures", "description": "Designed and printed marketing material"},
    {"pillar": PillarType.MARKETING_PROMOTION, "name": "Open House Events", "description": "Hosted events to present a property to the public"},
    {"pillar": PillarType.MARKETING_PROMOTION, "name": "Client Success Stories", "description": "Case studies and testimonials published with your permission"},

    # PROACTIVE OUTREACH
    {"pillar": PillarType.PROACTIVE_OUTREACH, "name": "Check-in Calls", "description": "Scheduled phone calls to see how things are going"},
    {"pillar": PillarType.PROACTIVE_OUTREACH, "name": "Opportunity Alerts", "description": "Early notice about opportunities that match your goals"},
    {"pillar": PillarType.PROACTIVE_OUTREACH, "name": "Referral Introductions", "description": "Introductions to trusted lenders, inspectors and contractors"},
    {"pillar": PillarType.PROACTIVE_OUTREACH, "name": "Annual Review Meeting", "description": "A yearly meeting to review your position and plans"},
    {"pillar": PillarType.PROACTIVE_OUTREACH, "name": "Personalized Recommendations", "description": "Suggestions tailored to your situation and timing"},
    {"pillar": PillarType.PROACTIVE_OUTREACH, "name": "Community Event Invitations", "description": "Invitations to local events and seminars"},

    # ONGOING RELATIONSHIP
    {"pillar": PillarType.ONGOING_RELATIONSHIP, "name": "Anniversary Cards", "description": "A card on the anniversary of your purchase or sale"},
    {"pillar": PillarType.ONGOING_RELATIONSHIP, "name": "Client Appreciation Events", "description": "Yearly gatherings to thank our clients"},
    {"pillar": PillarType.ONGOING_RELATIONSHIP, "name": "Home Value Estimates", "description": "Periodic estimates of what your property is worth"},
    {"pillar": PillarType.ONGOING_RELATIONSHIP, "name": "Maintenance Reminders", "description": "Seasonal reminders for upkeep and inspections"},
    {"pillar": PillarType.ONGOING_RELATIONSHIP, "name": "Holiday Gifts", "description": "A small gift during the holiday season"},
    {"pillar": PillarType.ONGOING_RELATIONSHIP, "name": "Priority Support Line", "description": "A direct line for questions long after closing"},
]


# Ids are assigned in catalog order starting at 1.
DEFAULT_ACTIVITIES: List[Dict[str, Any]] = [
    {
        "id": index,
        "pillar": int(entry["pillar"]),
        "pillar_name": PILLAR_NAMES[entry["pillar"]],
        "name": entry["name"],
        "description": entry["description"],
    }
    for index, entry in enumerate(_CATALOG, start=1)
]
