import logging
from decimal import Decimal

from sqlalchemy.orm import Session

from academy.domains.courses.models import Course

logger = logging.getLogger(__name__)


DEFAULT_COURSES: list[dict] = [
    {
        "id": "iot-robotics",
        "title": "IoT and Robotics (Ages 4-10)",
        "description": "Hands-on introduction to sensors, motors and simple robots for young builders.",
        "price": Decimal("100.00"),
        "duration": "8 Weeks",
        "age_group": "4-10 years",
        "highlights": ["Build your own robot", "Block-based programming", "Take-home kit"],
        "curriculum": [
            {"week": 1, "title": "What is a robot?", "topics": ["Robots around us", "Inputs and outputs"]},
            {"week": 2, "title": "Sensors", "topics": ["Light", "Distance", "Touch"]},
            {"week": 3, "title": "Motors and movement", "topics": ["DC motors", "Servos"]},
            {"week": 4, "title": "Final build", "topics": ["Design", "Build", "Show and tell"]},
        ],
        "schedule": [{"day": "Saturday", "time": "9:00 AM", "topic": "Weekly session"}],
        "faq": [{"question": "Does my child need prior experience?", "answer": "No, the course starts from zero."}],
    },
    {
        "id": "embedded-systems",
        "title": "Embedded Systems Bootcamp",
        "description": "Microcontrollers, peripherals and firmware from blinking an LED to a connected device.",
        "price": Decimal("150.00"),
        "duration": "8 Weeks",
        "age_group": "16+ years",
        "highlights": ["Arduino and ESP32", "Real hardware projects", "Certificate of completion"],
        "curriculum": [
            {"week": 1, "title": "Microcontroller basics", "topics": ["GPIO", "Toolchains"]},
            {"week": 2, "title": "Timers and interrupts", "topics": ["PWM", "ISRs"]},
            {"week": 3, "title": "Serial buses", "topics": ["UART", "I2C", "SPI"]},
            {"week": 4, "title": "Connectivity", "topics": ["Wi-Fi", "MQTT"]},
        ],
        "schedule": [{"day": "Sunday", "time": "2:00 PM", "topic": "Weekly session"}],
        "faq": [{"question": "Is hardware included?", "answer": "A starter kit is provided."}],
    },
    {
        "id": "product-development",
        "title": "Product Development Bootcamp",
        "description": "Take an electronics idea through prototyping, enclosure design and small-batch production.",
        "price": Decimal("200.00"),
        "duration": "8 Weeks",
        "age_group": "18+ years",
        "highlights": ["PCB design", "3D printed enclosures", "Go-to-market basics"],
        "curriculum": [
            {"week": 1, "title": "From idea to spec", "topics": ["User needs", "Requirements"]},
            {"week": 2, "title": "Prototyping", "topics": ["Breadboards", "Dev boards"]},
            {"week": 3, "title": "PCB design", "topics": ["Schematics", "Layout"]},
            {"week": 4, "title": "Manufacturing", "topics": ["Enclosures", "Small-batch runs"]},
        ],
        "schedule": [{"day": "Saturday", "time": "2:00 PM", "topic": "Weekly session"}],
        "faq": [{"question": "Who is this for?", "answer": "Makers and engineers with some electronics background."}],
    },
]


def seed_default_courses(db: Session) -> int:
    if db.query(Course).count() > 0:
        return 0
    for data in DEFAULT_COURSES:
        db.add(Course(**data))
    db.commit()
    logger.info("Seeded %d default courses", len(DEFAULT_COURSES))
    return len(DEFAULT_COURSES)
