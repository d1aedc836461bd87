"""Launch catalog: six localized courses at the introductory price, plus demo payments."""
from __future__ import annotations

import copy
import logging
from decimal import Decimal

from sqlalchemy.orm import Session

from coursehub.db.models import PAYMENT_COMPLETED, PAYMENT_FAILED, PAYMENT_PENDING
from coursehub.db.repositories import CourseRepository, PaymentRepository
from coursehub.payments.methods import PaymentMethod
from coursehub.payments.phone import is_valid_phone, normalize_phone

logger = logging.getLogger(__name__)

SUPPORTED_LOCALES: tuple[str, ...] = ("so", "en", "ar")

_IMAGE_QUERY = "?ixlib=rb-4.0.3&auto=format&fit=crop&w=500&h=300"

DEFAULT_COURSES: list[dict] = [
    {
        "id": "web-development",
        "title": {
            "so": "Web Development Buuxa",
            "en": "Complete Web Development",
            "ar": "تطوير الويب الكامل",
        },
        "description": {
            "so": "HTML, CSS, JavaScript iyo React. Wax ku ool ah oo aad ku dhisi karto websiteyo casri ah.",
            "en": "HTML, CSS, JavaScript and React. Everything you need to build modern websites.",
            "ar": "HTML و CSS و JavaScript و React. كل ما تحتاجه لبناء مواقع ويب حديثة.",
        },
        "category": "Technology",
        "duration": "8 saac",
        "rating": Decimal("4.9"),
        "image": "https://images.unsplash.com/photo-1461749280684-dccba630e2f6" + _IMAGE_QUERY,
        "file_url": "/courses/web-development.zip",
        "curriculum": [
            "HTML5 iyo CSS3 fundamentals",
            "JavaScript ES6+ programming",
            "React.js component development",
            "Responsive design principles",
        ],
    },
    {
        "id": "python-basics",
        "title": {
            "so": "Python Asaasiga",
            "en": "Python Basics",
            "ar": "أساسيات بايثون",
        },
        "description": {
            "so": "Baro Python programming oo aad ku dhisi karto applications iyo automation tools.",
            "en": "Learn Python programming to build applications and automation tools.",
            "ar": "تعلم برمجة بايثون لبناء التطبيقات وأدوات الأتمتة.",
        },
        "category": "Programming",
        "duration": "6 saac",
        "rating": Decimal("4.8"),
        "image": "https://images.unsplash.com/photo-1526379095098-d400fd0bf935" + _IMAGE_QUERY,
        "file_url": "/courses/python-basics.zip",
        "curriculum": [
            "Python syntax and basics",
            "Data structures and algorithms",
            "Object-oriented programming",
            "File handling and APIs",
        ],
    },
    {
        "id": "ms-office",
        "title": {
            "so": "Microsoft Office",
            "en": "Microsoft Office",
            "ar": "مايكروسوفت أوفيس",
        },
        "description": {
            "so": "Word, Excel, PowerPoint - dhammaan waxaad u baahan tahay xafiiska casriga ah.",
            "en": "Word, Excel, PowerPoint - everything you need for modern office work.",
            "ar": "Word و Excel و PowerPoint - كل ما تحتاجه للعمل المكتبي الحديث.",
        },
        "category": "Office",
        "duration": "5 saac",
        "rating": Decimal("4.7"),
        "image": "https://images.unsplash.com/photo-1586717799252-bd134ad00e26" + _IMAGE_QUERY,
        "file_url": "/courses/ms-office.zip",
        "curriculum": [
            "Microsoft Word advanced features",
            "Excel formulas and data analysis",
            "PowerPoint presentation design",
            "Office integration and collaboration",
        ],
    },
    {
        "id": "digital-marketing",
        "title": {
            "so": "Digital Marketing",
            "en": "Digital Marketing",
            "ar": "التسويق الرقمي",
        },
        "description": {
            "so": "Social Media, SEO, Google Ads - xirfadaha suuq-geynta casriga ah.",
            "en": "Social Media, SEO, Google Ads - modern marketing skills.",
            "ar": "وسائل التواصل الاجتماعي وSEO وإعلانات Google - مهارات التسويق الحديثة.",
        },
        "category": "Marketing",
        "duration": "7 saac",
        "rating": Decimal("4.8"),
        "image": "https://images.unsplash.com/photo-1460925895917-afdab827c52f" + _IMAGE_QUERY,
        "file_url": "/courses/digital-marketing.zip",
        "curriculum": [
            "Social media strategy",
            "Search engine optimization",
            "Google Ads and PPC",
            "Analytics and measurement",
        ],
    },
    {
        "id": "graphic-design",
        "title": {
            "so": "Graphic Design",
            "en": "Graphic Design",
            "ar": "التصميم الجرافيكي",
        },
        "description": {
            "so": "Canva, Photoshop - samee sawiro qurux badan oo xirfad leh.",
            "en": "Canva, Photoshop - create beautiful and professional graphics.",
            "ar": "Canva و Photoshop - إنشاء رسومات جميلة واحترافية.",
        },
        "category": "Design",
        "duration": "6 saac",
        "rating": Decimal("4.9"),
        "image": "https://images.unsplash.com/photo-1541462608143-67571c6738dd" + _IMAGE_QUERY,
        "file_url": "/courses/graphic-design.zip",
        "curriculum": [
            "Design principles and theory",
            "Canva for quick designs",
            "Photoshop advanced techniques",
            "Brand identity design",
        ],
    },
    {
        "id": "video-editing",
        "title": {
            "so": "Video Editing",
            "en": "Video Editing",
            "ar": "تحرير الفيديو",
        },
        "description": {
            "so": "CapCut, Premiere Pro - samee fiidiyoowyin xirfad leh oo soo jiidaya.",
            "en": "CapCut, Premiere Pro - create professional and engaging videos.",
            "ar": "CapCut و Premiere Pro - إنشاء مقاطع فيديو احترافية وجذابة.",
        },
        "category": "Media",
        "duration": "7 saac",
        "rating": Decimal("4.8"),
        "image": "https://images.unsplash.com/photo-1574717024653-61fd2cf4d44d" + _IMAGE_QUERY,
        "file_url": "/courses/video-editing.zip",
        "curriculum": [
            "Video editing fundamentals",
            "CapCut mobile editing",
            "Adobe Premiere Pro workflow",
            "Color grading and audio",
        ],
    },
]


def seed_catalog(session: Session) -> int:
    """Insert the launch courses when the catalog is empty.

    Returns the number of courses inserted (``0`` if any course exists).
    """
    repo = CourseRepository(session)
    if repo.count() > 0:
        return 0

    for course in DEFAULT_COURSES:
        repo.create(price=Decimal("0.50"), **copy.deepcopy(course))
    logger.info("Seeded %d catalog courses", len(DEFAULT_COURSES))
    return len(DEFAULT_COURSES)


# (course_id, phone as typed, method, status, transaction_id)
DEMO_PAYMENTS: list[tuple[str, str, PaymentMethod, str, str | None]] = [
    ("web-development", "0615123456", PaymentMethod.EVC, PAYMENT_COMPLETED, "DEMO_TXN_1_EVC"),
    ("python-basics", "634567891", PaymentMethod.ZAAD, PAYMENT_COMPLETED, "DEMO_TXN_2_ZAAD"),
    ("ms-office", "0621234560", PaymentMethod.EDAHAB, PAYMENT_FAILED, None),
    ("graphic-design", "0907654321", PaymentMethod.EVC, PAYMENT_PENDING, None),
]


def seed_demo_payments(session: Session) -> int:
    """Insert one payment per status across the three mobile-money providers.

    Phones go through the same normalization as checkout; a row whose phone
    does not validate raises ``ValueError`` instead of being stored.
    """
    repo = PaymentRepository(session)
    for course_id, phone, method, status, txn in DEMO_PAYMENTS:
        if not is_valid_phone(phone, method):
            raise ValueError(f"Demo payment for {course_id} has an invalid phone")
        repo.create(
            course_id=course_id,
            phone=normalize_phone(phone, method),
            amount=Decimal("0.50"),
            payment_method=method.value,
            status=status,
            transaction_id=txn,
        )
    logger.info("Seeded %d demo payments", len(DEMO_PAYMENTS))
    return len(DEMO_PAYMENTS)
