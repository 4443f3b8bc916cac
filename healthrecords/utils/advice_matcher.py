# /healthrecords/utils/advice_matcher.py
"""Keyword lookup behind the health assistant.

Rules are checked top to bottom and the first hit wins, so the order of
ADVICE_RULES is part of the behaviour: "doctor" text that also mentions a
fever gets fever advice.
"""
from typing import Callable, List, Tuple

FEVER_ADVICE = (
    "For fever management:\n"
    "• Rest and stay hydrated\n"
    "• Take temperature regularly\n"
    "• Consider over-the-counter fever reducers if needed\n"
    "• Seek medical attention if fever persists over 3 days or exceeds 103°F (39.4°C)\n"
    "• If you're a migrant worker, ensure you have access to medical care and don't hesitate to visit a healthcare facility."
)

HEADACHE_ADVICE = (
    "For headache relief:\n"
    "• Ensure adequate hydration\n"
    "• Get proper rest in a quiet, dark room\n"
    "• Consider gentle neck and shoulder stretches\n"
    "• Apply cold or warm compress\n"
    "• If headaches are frequent or severe, please consult a doctor\n"
    "• For migrant workers: workplace stress can contribute to headaches - ensure proper work-rest balance."
)

COUGH_COLD_ADVICE = (
    "For cough and cold symptoms:\n"
    "• Stay hydrated with warm fluids\n"
    "• Get plenty of rest\n"
    "• Use honey for soothing throat irritation\n"
    "• Consider steam inhalation\n"
    "• Avoid smoking and secondhand smoke\n"
    "• If symptoms persist beyond a week or worsen, seek medical care\n"
    "• Wear a mask around others to prevent spread."
)

APPOINTMENT_ADVICE = (
    "To book a medical appointment:\n"
    "• Use the 'Appointments' section in this app\n"
    "• Call your preferred hospital/clinic directly\n"
    "• For emergencies, visit the nearest emergency room\n"
    "• Keep your ABHA ID and identification ready\n"
    "• If you're a migrant worker, some states offer special health schemes - check with local authorities."
)

VACCINATION_ADVICE = (
    "About vaccinations:\n"
    "• Keep your vaccination records updated in this app\n"
    "• Follow the national immunization schedule\n"
    "• For travel, check required vaccinations for your destination\n"
    "• COVID-19 vaccines are available at government centers\n"
    "• Migrant workers should ensure they're up-to-date with required vaccines for their work location."
)

EMERGENCY_ADVICE = (
    "In case of medical emergency:\n"
    "• Call 102 (ambulance) or 108 (emergency services) immediately\n"
    "• Go to the nearest hospital emergency department\n"
    "• Keep your emergency contact information updated\n"
    "• If you're a migrant worker, inform your supervisor and ensure someone knows your location\n"
    "• Keep important medical information easily accessible."
)

MEDICATION_ADVICE = (
    "About medications:\n"
    "• Always take medicines as prescribed by your doctor\n"
    "• Set reminders for medication times\n"
    "• Keep a list of all medications you're taking\n"
    "• Don't share medications with others\n"
    "• Store medicines properly (away from heat and moisture)\n"
    "• If you miss a dose, consult your doctor or pharmacist about what to do."
)

NUTRITION_ADVICE = (
    "For healthy nutrition:\n"
    "• Eat a balanced diet with fruits, vegetables, whole grains, and proteins\n"
    "• Stay hydrated - drink at least 8 glasses of water daily\n"
    "• Limit processed foods and excess sugar\n"
    "• For migrant workers: try to maintain nutritious eating habits despite work schedules\n"
    "• If you have dietary restrictions due to health conditions, follow your doctor's advice."
)

DEFAULT_ADVICE = (
    "I'm here to help with your health questions! I can provide general health advice, "
    "help you understand symptoms, guide you on when to seek medical care, and assist with "
    "using this health records system.\n\n"
    "For specific medical concerns, please consult with a healthcare professional. "
    "If this is an emergency, please call 102 or visit the nearest hospital immediately.\n\n"
    "What specific health topic would you like to know more about?"
)


def contains_any(*keywords: str) -> Callable[[str], bool]:
    """Predicate that is true when lower-cased text contains any keyword."""
    def predicate(text: str) -> bool:
        return any(keyword in text for keyword in keywords)
    predicate.keywords = keywords
    return predicate


ADVICE_RULES: List[Tuple[Callable[[str], bool], str]] = [
    (contains_any('fever', 'temperature'), FEVER_ADVICE),
    (contains_any('headache', 'head pain'), HEADACHE_ADVICE),
    (contains_any('cough', 'cold'), COUGH_COLD_ADVICE),
    (contains_any('appointment', 'doctor'), APPOINTMENT_ADVICE),
    (contains_any('vaccination', 'vaccine'), VACCINATION_ADVICE),
    (contains_any('emergency', 'urgent'), EMERGENCY_ADVICE),
    (contains_any('medicine', 'medication'), MEDICATION_ADVICE),
    (contains_any('diet', 'food', 'nutrition'), NUTRITION_ADVICE),
]

QUICK_QUESTIONS = [
    "How do I book an appointment?",
    "What should I do for fever?",
    "Tell me about vaccination schedules",
    "How to manage common cold symptoms?",
    "Emergency contact information",
]

EMERGENCY_CONTACTS = {
    'ambulance': '102 / 108',
    'police': '100',
    'fire': '101',
    'helpline': '1056',
}


def match_advice(text, rules=None) -> str:
    """Return canned advice for free text. Never raises; unknown input gets DEFAULT_ADVICE."""
    lowered = text.lower() if isinstance(text, str) else ''
    for predicate, response in (ADVICE_RULES if rules is None else rules):
        if predicate(lowered):
            return response
    return DEFAULT_ADVICE
