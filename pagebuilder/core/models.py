"""Data models for the page builder: page, sections, images and catalogs."""

from __future__ import annotations

import copy
import uuid
from dataclasses import MISSING, asdict, dataclass, field, fields
from typing import ClassVar, Dict, List, Optional, Type, TypeVar

ImageStore = Dict[str, str]

R = TypeVar("R", bound="Record")


def new_id(prefix: str) -> str:
    """Return a short random identifier such as ``c-1a2b3c4d``."""

    return f"{prefix}-{uuid.uuid4().hex[:8]}"


def items_of(item_type: type, **kwargs) -> List:
    """Declare a list field whose entries are ``item_type`` records (or ``str``)."""

    return field(default_factory=list, metadata={"item": item_type}, **kwargs)


def _field_default(f) -> object:
    if f.default is not MISSING:
        return f.default
    if f.default_factory is not MISSING:  # type: ignore[misc]
        return f.default_factory()  # type: ignore[misc]
    return None


def _coerce(f, raw: object) -> object:
    default = _field_default(f)
    item_type = f.metadata.get("item")
    if item_type is not None:
        if not isinstance(raw, list):
            return default
        if item_type is str:
            return [str(v) for v in raw if isinstance(v, (str, int, float))]
        return [item_type.from_dict(v) for v in raw if isinstance(v, dict)]
    if isinstance(default, bool):
        return raw if isinstance(raw, bool) else default
    if isinstance(default, int):
        try:
            return int(raw)  # type: ignore[arg-type]
        except (TypeError, ValueError):
            return default
    if isinstance(default, float):
        try:
            return float(raw)  # type: ignore[arg-type]
        except (TypeError, ValueError):
            return default
    if isinstance(default, str) or default is None:
        if raw is None:
            return default
        return str(raw) if isinstance(raw, (str, int, float)) else default
    return raw


class Record:
    """Mixin giving dataclasses a tolerant dictionary round trip.

    Unknown keys are dropped and values of the wrong type fall back to the
    field default, so malformed or partial data never raises.
    """

    def to_dict(self) -> Dict[str, object]:
        return asdict(self)  # type: ignore[call-overload]

    @classmethod
    def from_dict(cls: Type[R], data: object) -> R:
        if not isinstance(data, dict):
            data = {}
        values = {}
        for f in fields(cls):  # type: ignore[arg-type]
            if f.init and f.name in data:
                values[f.name] = _coerce(f, data[f.name])
        return cls(**values)


# ---------------------------------------------------------------------------
# List items
# ---------------------------------------------------------------------------


@dataclass
class NavMenuItem(Record):
    text: str = ""
    link: str = "#"
    icon_name: str = ""


@dataclass
class HeroSlide(Record):
    title: str = ""
    subtitle: str = ""
    image_prompt: str = ""


@dataclass
class FeatureItem(Record):
    icon_name: str = ""
    title: str = ""
    description: str = ""


@dataclass
class GalleryItem(Record):
    image_prompt: str = ""
    alt_text: str = ""


@dataclass
class TestimonialItem(Record):
    quote: str = ""
    author: str = ""
    role: str = ""
    avatar_image_prompt: str = ""


@dataclass
class PricingPlan(Record):
    name: str = ""
    price: str = ""
    features: List[str] = items_of(str)
    is_featured: bool = False
    cta_text: str = ""
    cta_link: str = "#"


@dataclass
class FAQItem(Record):
    question: str = ""
    answer: str = ""


@dataclass
class SocialLink(Record):
    network: str = "twitter"
    url: str = ""


@dataclass
class CourseLesson(Record):
    id: str = ""
    title: str = ""
    description: str = ""
    youtube_video_id: str = ""
    duration: str = ""
    is_free_preview: bool = False


@dataclass
class CourseChapter(Record):
    id: str = ""
    title: str = ""
    image_prompt: str = ""
    lessons: List[CourseLesson] = items_of(CourseLesson)


# ---------------------------------------------------------------------------
# Sections
# ---------------------------------------------------------------------------


class Section(Record):
    """A tagged page section; ``kind`` is the tag and never changes."""

    kind: ClassVar[str] = ""

    @property
    def section_kind(self) -> str:
        return self.kind

    def to_dict(self) -> Dict[str, object]:
        payload: Dict[str, object] = {"kind": self.section_kind}
        payload.update(asdict(self))  # type: ignore[call-overload]
        return payload

    def field_names(self) -> List[str]:
        return [f.name for f in fields(self)]  # type: ignore[arg-type]


@dataclass
class NavSection(Section):
    kind: ClassVar[str] = "nav"
    logo_type: str = "text"
    logo_text: str = ""
    logo_image_prompt: str = ""
    logo_width: int = 140
    nav_style: str = "sticky"
    layout: str = "standard"
    mobile_layout: str = "hamburger"
    menu_items: List[NavMenuItem] = items_of(NavMenuItem)
    sign_in_button_enabled: bool = False
    sign_in_button_text: str = "Sign In"
    cart_button_enabled: bool = False


@dataclass
class HeroSection(Section):
    kind: ClassVar[str] = "hero"
    layout: str = "background"
    title: str = ""
    subtitle: str = ""
    cta_text: str = ""
    cta_link: str = "#"
    background_type: str = "image"
    image_prompt: str = ""
    split_image_prompt: str = ""
    youtube_video_id: str = ""
    slides: List[HeroSlide] = items_of(HeroSlide)
    form_id: str = ""
    button_color: str = ""
    background_color_light: str = ""
    background_color_dark: str = ""
    animation: str = "none"


@dataclass
class FeaturesSection(Section):
    kind: ClassVar[str] = "features"
    title: str = ""
    subtitle: str = ""
    items: List[FeatureItem] = items_of(FeatureItem)
    animation: str = "none"


@dataclass
class WhyChooseUsSection(Section):
    kind: ClassVar[str] = "whyChooseUs"
    title: str = ""
    subtitle: str = ""
    items: List[FeatureItem] = items_of(FeatureItem)
    animation: str = "none"


@dataclass
class GallerySection(Section):
    kind: ClassVar[str] = "gallery"
    title: str = ""
    subtitle: str = ""
    items: List[GalleryItem] = items_of(GalleryItem)
    animation: str = "none"


@dataclass
class TestimonialsSection(Section):
    kind: ClassVar[str] = "testimonials"
    title: str = ""
    subtitle: str = ""
    items: List[TestimonialItem] = items_of(TestimonialItem)
    animation: str = "none"


@dataclass
class PricingSection(Section):
    kind: ClassVar[str] = "pricing"
    title: str = ""
    subtitle: str = ""
    plans: List[PricingPlan] = items_of(PricingPlan)
    animation: str = "none"


@dataclass
class FAQSection(Section):
    kind: ClassVar[str] = "faq"
    title: str = ""
    subtitle: str = ""
    items: List[FAQItem] = items_of(FAQItem)
    animation: str = "none"


@dataclass
class ProductsSection(Section):
    kind: ClassVar[str] = "products"
    title: str = ""
    subtitle: str = ""
    item_ids: List[str] = items_of(str)
    animation: str = "none"


@dataclass
class CourseSection(Section):
    kind: ClassVar[str] = "course"
    title: str = ""
    subtitle: str = ""
    description: str = ""
    media_type: str = "image"
    image_prompt: str = ""
    youtube_video_id: str = ""
    price: float = 0.0
    currency: str = "$"
    buy_button_text: str = "Enroll Now"
    chapters: List[CourseChapter] = items_of(CourseChapter)
    animation: str = "none"


@dataclass
class VideoSection(Section):
    kind: ClassVar[str] = "video"
    title: str = ""
    subtitle: str = ""
    video_id: str = ""
    animation: str = "none"


@dataclass
class BookingSection(Section):
    kind: ClassVar[str] = "booking"
    title: str = ""
    subtitle: str = ""
    cta_text: str = ""
    booking_embed_code: str = ""
    animation: str = "none"


@dataclass
class ContactSection(Section):
    kind: ClassVar[str] = "contact"
    title: str = ""
    subtitle: str = ""
    animation: str = "none"


@dataclass
class CustomFormSection(Section):
    kind: ClassVar[str] = "customForm"
    title: str = ""
    subtitle: str = ""
    form_id: str = ""
    animation: str = "none"


@dataclass
class EmbedSection(Section):
    kind: ClassVar[str] = "embed"
    title: str = ""
    subtitle: str = ""
    embed_type: str = "inline-iframe"
    embed_code: str = ""
    api_key: str = ""
    animation: str = "none"


@dataclass
class CTASection(Section):
    kind: ClassVar[str] = "cta"
    title: str = ""
    subtitle: str = ""
    cta_text: str = ""
    cta_link: str = "#"
    animation: str = "none"


@dataclass
class FooterSection(Section):
    kind: ClassVar[str] = "footer"
    copyright_text: str = ""
    social_links: List[SocialLink] = items_of(SocialLink)


@dataclass
class UnknownSection(Section):
    """A section whose kind this version does not know; kept verbatim."""

    unknown_kind: str = ""
    data: Dict[str, object] = field(default_factory=dict)

    @property
    def section_kind(self) -> str:
        return self.unknown_kind

    def to_dict(self) -> Dict[str, object]:
        payload = copy.deepcopy(self.data)
        payload["kind"] = self.unknown_kind
        return payload


SECTION_TYPES: Dict[str, Type[Section]] = {
    cls.kind: cls
    for cls in (
        NavSection,
        HeroSection,
        FeaturesSection,
        WhyChooseUsSection,
        GallerySection,
        TestimonialsSection,
        PricingSection,
        FAQSection,
        ProductsSection,
        CourseSection,
        VideoSection,
        BookingSection,
        ContactSection,
        CustomFormSection,
        EmbedSection,
        CTASection,
        FooterSection,
    )
}


def section_from_dict(data: object, kind: Optional[str] = None) -> Section:
    """Build the section variant for ``data``.

    ``kind`` is used when the payload has no ``kind`` tag of its own (older
    pages keyed their sections by kind).
    """

    if not isinstance(data, dict):
        data = {}
    tag = data.get("kind") if isinstance(data.get("kind"), str) else kind
    tag = tag or ""
    cls = SECTION_TYPES.get(tag)
    if cls is None:
        payload = {k: copy.deepcopy(v) for k, v in data.items() if k != "kind"}
        return UnknownSection(unknown_kind=tag, data=payload)
    return cls.from_dict(data)


# ---------------------------------------------------------------------------
# Page
# ---------------------------------------------------------------------------


@dataclass
class Theme(Record):
    primary_color_name: str = "indigo"
    text_color_name: str = "slate"
    font_family: str = "Inter"


@dataclass
class GenerationConfig(Record):
    base_prompt: str = ""
    tone: str = "Professional"
    palette: str = ""


@dataclass
class Page:
    name: str = "My Page"
    theme: Theme = field(default_factory=Theme)
    generation: GenerationConfig = field(default_factory=GenerationConfig)
    section_order: List[str] = field(default_factory=list)
    sections: Dict[str, Section] = field(default_factory=dict)
    images: ImageStore = field(default_factory=dict)
    version: int = 1

    def section(self, key: str) -> Optional[Section]:
        return self.sections.get(key)

    def ordered_keys(self) -> List[str]:
        """Section keys in display order; keys missing from ``section_order`` go last.

        A key listed more than once keeps its first position.
        """

        ordered = list(dict.fromkeys(k for k in self.section_order if k in self.sections))
        ordered.extend(k for k in self.sections if k not in ordered)
        return ordered

    def to_dict(self) -> Dict[str, object]:
        return {
            "name": self.name,
            "version": self.version,
            "theme": self.theme.to_dict(),
            "generation": self.generation.to_dict(),
            "section_order": list(self.section_order),
            "sections": {key: s.to_dict() for key, s in self.sections.items()},
            "images": dict(self.images),
        }

    @classmethod
    def from_dict(cls, data: Dict[str, object]) -> "Page":
        def safe_int(val, default=1):
            try:
                return int(val)
            except (TypeError, ValueError):
                return default

        raw_sections = data.get("sections", {})
        sections: Dict[str, Section] = {}
        if isinstance(raw_sections, dict):
            for key, payload in raw_sections.items():
                sections[str(key)] = section_from_dict(payload, kind=str(key))

        raw_order = data.get("section_order")
        if isinstance(raw_order, list):
            order = [str(k) for k in raw_order if isinstance(k, str)]
        else:
            order = list(sections)

        raw_images = data.get("images", {})
        images: ImageStore = {}
        if isinstance(raw_images, dict):
            images = {str(k): str(v) for k, v in raw_images.items() if isinstance(v, str)}

        return cls(
            name=str(data.get("name", "My Page")),
            theme=Theme.from_dict(data.get("theme")),
            generation=GenerationConfig.from_dict(data.get("generation")),
            section_order=order,
            sections=sections,
            images=images,
            version=safe_int(data.get("version", 1)),
        )


# ---------------------------------------------------------------------------
# Catalogs supplied by collaborators (read-only to the editor)
# ---------------------------------------------------------------------------


@dataclass
class MediaFile(Record):
    id: str = ""
    url: str = ""
    name: str = ""
    description: str = ""
    keywords: List[str] = items_of(str)


@dataclass
class Product(Record):
    id: str = ""
    name: str = ""
    price: float = 0.0
    category: str = ""
    image_url: str = ""


@dataclass
class CustomFormField(Record):
    id: str = ""
    label: str = ""
    type: str = "text"
    required: bool = False


@dataclass
class CustomForm(Record):
    id: str = ""
    name: str = ""
    fields: List[CustomFormField] = items_of(CustomFormField)


@dataclass
class PageRef(Record):
    id: str = ""
    name: str = ""
