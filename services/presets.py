"""
Built-in starter forms offered by the builder's "new form" screen
"""
import copy
from typing import Any, Dict, List, Optional

_DEFAULT_STYLING = {
    "backgroundColor": "#ffffff",
    "textColor": "#1f2937",
    "fontFamily": "var(--font-inter)",
    "borderRadius": "12px",
}


def _styling(primary: str) -> Dict[str, str]:
    return {**_DEFAULT_STYLING, "primaryColor": primary}


def _field(fid: str, ftype: str, label: str, required: bool, width: str = "full", **extra) -> Dict[str, Any]:
    field = {"id": fid, "type": ftype, "label": label, "required": required, "width": width}
    field.update(extra)
    return field


PRESETS: List[Dict[str, Any]] = [
    {
        "id": "contact-form",
        "name": "Contact Form",
        "description": "Simple contact form for inquiries and feedback",
        "category": "single-step",
        "isMultistep": False,
        "title": "Contact Us",
        "formDescription": "Get in touch with us",
        "fields": [
            _field("name", "text", "Full Name", True, "half", placeholder="Enter your full name"),
            _field("email", "email", "Email Address", True, "half", placeholder="Enter your email"),
            _field("subject", "text", "Subject", True, placeholder="What is this about?"),
            _field("message", "textarea", "Message", True, placeholder="Tell us more..."),
        ],
        "settings": {"allowMultipleSubmissions": True, "showProgressBar": True, "submitButtonText": "Send Message"},
        "styling": _styling("#3b82f6"),
        "thankYouPage": {
            "title": "Message Sent!",
            "text": "Thank you for reaching out. We'll get back to you within 24 hours.",
        },
    },
    {
        "id": "survey-form",
        "name": "Customer Survey",
        "description": "Comprehensive customer feedback survey",
        "category": "single-step",
        "isMultistep": False,
        "title": "Customer Satisfaction Survey",
        "formDescription": "Help us improve by sharing your experience",
        "fields": [
            _field("satisfaction", "radio", "How satisfied are you with our service?", True,
                   options=["Very Satisfied", "Satisfied", "Neutral", "Dissatisfied", "Very Dissatisfied"]),
            _field("recommend", "radio", "Would you recommend us to others?", True,
                   options=["Definitely", "Probably", "Maybe", "Probably Not", "Definitely Not"]),
            _field("improvements", "multiselect", "What could we improve?", False,
                   options=["Customer Service", "Product Quality", "Website Experience", "Pricing",
                            "Delivery Speed", "Communication"]),
            _field("comments", "textarea", "Additional Comments", False, placeholder="Any other feedback?"),
        ],
        "settings": {"allowMultipleSubmissions": False, "showProgressBar": True, "submitButtonText": "Submit Survey"},
        "styling": _styling("#10b981"),
        "thankYouPage": {
            "title": "Survey Complete!",
            "text": "Thank you for your valuable feedback. Your input helps us serve you better.",
        },
    },
    {
        "id": "newsletter-signup",
        "name": "Newsletter Signup",
        "description": "Simple newsletter subscription form",
        "category": "single-step",
        "isMultistep": False,
        "title": "Stay Updated",
        "formDescription": "Subscribe to our newsletter for the latest updates",
        "fields": [
            _field("email", "email", "Email Address", True, placeholder="Enter your email address"),
            _field("name", "text", "First Name", False, "half", placeholder="Enter your first name"),
            _field("interests", "multiselect", "What are you interested in?", False, "half",
                   options=["Product Updates", "Industry News", "Tips & Tutorials", "Special Offers", "Events"]),
        ],
        "settings": {"allowMultipleSubmissions": True, "showProgressBar": True, "submitButtonText": "Subscribe"},
        "styling": _styling("#ef4444"),
        "thankYouPage": {
            "title": "Welcome Aboard!",
            "text": "You're now subscribed to our newsletter.",
        },
    },
    {
        "id": "onboarding-form",
        "name": "User Onboarding",
        "description": "Multi-step user onboarding process",
        "category": "multi-step",
        "isMultistep": True,
        "title": "Welcome! Let's Get Started",
        "formDescription": "Help us personalize your experience",
        "steps": [
            {
                "id": "step1",
                "title": "Personal Information",
                "description": "Tell us about yourself",
                "fields": [
                    _field("firstName", "text", "First Name", True, "half"),
                    _field("lastName", "text", "Last Name", True, "half"),
                    _field("email", "email", "Email Address", True),
                ],
            },
            {
                "id": "step2",
                "title": "Preferences",
                "description": "Help us customize your experience",
                "fields": [
                    _field("role", "select", "What's your role?", True,
                           options=["Developer", "Designer", "Product Manager", "Marketing", "Sales", "Other"]),
                    _field("interests", "multiselect", "What are you interested in?", False,
                           options=["Analytics", "Automation", "Integration", "Reporting", "Mobile", "API"]),
                ],
            },
            {
                "id": "step3",
                "title": "Goals",
                "description": "What do you want to achieve?",
                "fields": [
                    _field("timeline", "radio", "When do you want to achieve this?", True,
                           options=["Within 1 month", "Within 3 months", "Within 6 months", "No specific timeline"]),
                    _field("additionalInfo", "textarea", "Anything else we should know?", False),
                ],
            },
        ],
        "settings": {
            "allowMultipleSubmissions": False,
            "showProgressBar": True,
            "stepUI": "numbers",
            "submitButtonText": "Complete Setup",
        },
        "styling": _styling("#3b82f6"),
        "thankYouPage": {
            "title": "Setup Complete!",
            "text": "Welcome to the team! We're excited to help you achieve your goals.",
        },
    },
]


def list_presets() -> List[Dict[str, Any]]:
    return copy.deepcopy(PRESETS)


def get_preset(preset_id: str) -> Optional[Dict[str, Any]]:
    for preset in PRESETS:
        if preset["id"] == preset_id:
            return copy.deepcopy(preset)
    return None
