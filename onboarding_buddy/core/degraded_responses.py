"""
Canned replies shown when the assistant cannot answer normally.

Every failure the orchestrator recovers from maps to one of these texts so
the transport always receives plain reply text.

Dependencies: None
System role: User-facing degraded-mode content
"""

DEGRADED_MODE_REPLY = (
    "<div class='fallback-message'>"
    "<h3>OnboardingBuddy Assistant</h3>"
    "<p>I'm here to help with your onboarding! However, my AI capabilities are currently unavailable.</p>"
    "<p><strong>I can still help you with:</strong></p>"
    "<ul>"
    "<li>Accessing training materials</li>"
    "<li>Finding uploaded documents</li>"
    "<li>Basic onboarding guidance</li>"
    "</ul>"
    "<p>For immediate assistance, please contact your manager or HR department.</p>"
    "</div>"
)

RATE_LIMIT_REPLY = (
    "<div class='rate-limit-message'>"
    "<h3>Rate Limit Reached</h3>"
    "<p>I'm receiving too many requests right now. Please wait a moment and try again.</p>"
    "<p>I'll be ready to help once the rate limit resets!</p>"
    "</div>"
)

CONTENT_TOO_LARGE_REPLY = (
    "<div class='content-limit-message'>"
    "<h3>Too Much Content</h3>"
    "<p>That's a lot of information! Let's narrow this down into smaller pieces.</p>"
    "<p><strong>Try asking me about:</strong></p>"
    "<ul>"
    "<li>One specific topic at a time</li>"
    "<li>Particular features or processes</li>"
    "<li>Specific questions you have</li>"
    "</ul>"
    "<p>You can also split a long request or a large attachment into several messages.</p>"
    "</div>"
)

EXTRACTION_FAILURE_REPLY = "I had trouble with that response. Please try again."

EMPTY_REPLY_PLACEHOLDER = "I apologize, but I couldn't generate a proper response."

DEFAULT_WELCOME_REPLY = (
    "<div class='welcome-message'>"
    "<h2>Welcome to OnboardingBuddy!</h2>"
    "<p>I'm your onboarding assistant, and I'm here to help you get started.</p>"
    "<p><strong>What can I help you with today?</strong></p>"
    "<ul>"
    "<li>Getting started with your new role</li>"
    "<li>Finding training materials</li>"
    "<li>Answering questions about company policies</li>"
    "<li>Tracking your onboarding progress</li>"
    "</ul>"
    "<p>What would you like to know first?</p>"
    "</div>"
)
