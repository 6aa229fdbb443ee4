"""Section type table: per-kind edit forms, default list items and previews.

Each supported kind maps to a :class:`SectionType`. Lookups for kinds that
are not in the table fall back to a placeholder form and a placeholder
render; they never raise.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field, replace
from typing import Callable, Dict, List, Mapping, Optional, Tuple

from . import lists
from .drafts import DraftStore
from .forms import Catalogs, EditForm, FieldNode, FormCollaborators, FormField, ListField
from .images import preview_images
from .models import (
    SECTION_TYPES,
    CourseChapter,
    CourseLesson,
    FAQItem,
    FeatureItem,
    GalleryItem,
    HeroSlide,
    NavMenuItem,
    PricingPlan,
    Section,
    SocialLink,
    TestimonialItem,
    Theme,
    new_id,
)
from .preview import PREVIEW, render_section

logger = logging.getLogger(__name__)

FormBuilder = Callable[[Section, DraftStore, FormCollaborators], List[FieldNode]]

ANIMATIONS = [("none", "None"), ("fade-in-up", "Fade in up")]
SOCIAL_NETWORKS = ["twitter", "linkedin", "github", "facebook", "instagram"]


# ---- default list items ----------------------------------------------


def default_feature() -> FeatureItem:
    return FeatureItem(icon_name="Sparkles", title="New Feature", description="A description.")


def default_gallery_item() -> GalleryItem:
    return GalleryItem(image_prompt="A new beautiful image", alt_text="new image")


def default_testimonial() -> TestimonialItem:
    return TestimonialItem(
        quote="New quote.", author="Anonymous", role="User", avatar_image_prompt="A new friendly face."
    )


def default_faq() -> FAQItem:
    return FAQItem(question="New Question?", answer="New Answer.")


def default_plan() -> PricingPlan:
    return PricingPlan(name="New", price="$0", features=[], is_featured=False, cta_text="Go", cta_link="#")


def default_plan_feature() -> str:
    return "New Feature"


def default_menu_item() -> NavMenuItem:
    return NavMenuItem(text="New Item", link="#", icon_name="Circle")


def default_social_link() -> SocialLink:
    return SocialLink(network="twitter", url="https://twitter.com")


def default_slide() -> HeroSlide:
    return HeroSlide(title="New Slide", subtitle="", image_prompt="A new slide image")


def default_chapter() -> CourseChapter:
    return CourseChapter(id=new_id("c"), title="New Chapter", lessons=[])


def default_lesson() -> CourseLesson:
    return CourseLesson(id=new_id("l"), title="New Lesson", duration="00:00")


# ---- field helpers -----------------------------------------------------


def _setter(m: DraftStore, name: str) -> Callable[[object], None]:
    def apply(value: object) -> None:
        m.set_field(name, value)

    return apply


def _field(draft: Section, m: DraftStore, name: str, label: str, kind: str = "text", **extra) -> FormField:
    return FormField(name=name, label=label, kind=kind, value=getattr(draft, name), on_change=_setter(m, name), **extra)


def _image(draft: Section, m: DraftStore, c: FormCollaborators, name: str, label: str, context: str) -> FormField:
    apply = _setter(m, name)
    return FormField(
        name=name,
        label=label,
        kind="image",
        value=getattr(draft, name),
        on_change=apply,
        on_pick=lambda: c.pick_media(apply),
        context=context,
        placeholder="Image URL or a prompt describing the image",
    )


def _select(draft: Section, m: DraftStore, name: str, label: str, options, rebuild: bool = False) -> FormField:
    return _field(draft, m, name, label, "select", options=list(options), rebuild=rebuild)


def _title_subtitle(draft: Section, m: DraftStore, label: str) -> List[FieldNode]:
    return list(lists.header_fields(draft, m.set_field, context=label))


def _animation(draft: Section, m: DraftStore) -> FormField:
    return _select(draft, m, "animation", "Animation", ANIMATIONS)


def _item_field(
    item: object, index: int, m: DraftStore, list_field: str, name: str, label: str, kind: str = "text", **extra
) -> FormField:
    def apply(value: object) -> None:
        m.set_item_field(index, name, value, field=list_field)

    return FormField(
        name=f"{list_field}.{index}.{name}",
        label=label,
        kind=kind,
        value=getattr(item, name),
        on_change=apply,
        **extra,
    )


def _item_image(
    item: object, index: int, m: DraftStore, c: FormCollaborators, list_field: str, name: str, label: str, context: str
) -> FormField:
    node = _item_field(item, index, m, list_field, name, label, "image", context=context)
    node.on_pick = lambda: c.pick_media(node.on_change)
    node.placeholder = "Image URL or a prompt describing the image"
    return node


def _items(
    draft: Section,
    m: DraftStore,
    list_field: str,
    label: str,
    add_text: str,
    default: Callable[[], object],
    render_item: Callable[[object, int], List[FieldNode]],
    header: Optional[List[FormField]] = None,
) -> ListField:
    def current() -> list:
        live = m.draft
        return list(getattr(live, list_field)) if live is not None else []

    return lists.render(
        getattr(draft, list_field),
        on_reorder=lambda new: m.set_items(new, field=list_field),
        render_item=render_item,
        on_add=lambda: m.set_items(lists.append(current(), default()), field=list_field),
        on_remove=lambda i: m.set_items(lists.remove(current(), i), field=list_field),
        name=list_field,
        label=label,
        add_text=add_text,
        header=header,
        current=current,
    )


def _nested(
    m: DraftStore,
    parent_field: str,
    parent_index: int,
    child_field: str,
    items: list,
    label: str,
    add_text: str,
    default: Callable[[], object],
    render_item: Callable[[object, int], List[FieldNode]],
) -> ListField:
    """A list stored on one item of another list (plan features, chapter lessons)."""

    def current() -> list:
        live = m.draft
        if live is None:
            return []
        parents = getattr(live, parent_field)
        return list(getattr(parents[parent_index], child_field)) if parent_index < len(parents) else []

    def put(new: list) -> None:
        m.set_item_field(parent_index, child_field, list(new), field=parent_field)

    return lists.render(
        items,
        on_reorder=put,
        render_item=render_item,
        on_add=lambda: put(lists.append(current(), default())),
        on_remove=lambda i: put(lists.remove(current(), i)),
        name=f"{parent_field}.{parent_index}.{child_field}",
        label=label,
        add_text=add_text,
        current=current,
    )


def link_options(catalogs: Catalogs) -> List[Tuple[str, str]]:
    options = [("#", "Top of page")]
    options += [(f"#{key}", f"Section: {key}") for key in catalogs.section_keys]
    options += [(f"/{page.id}", f"Page: {page.name or page.id}") for page in catalogs.pages]
    return options


# ---- per-kind forms ----------------------------------------------------


def nav_form(draft, m, c) -> List[FieldNode]:
    nodes: List[FieldNode] = [
        _select(draft, m, "logo_type", "Logo Type", [("text", "Text"), ("image", "Image")], rebuild=True)
    ]
    if draft.logo_type == "image":
        nodes.append(_image(draft, m, c, "logo_image_prompt", "Logo Image", "website logo"))
        nodes.append(_field(draft, m, "logo_width", "Logo Width (px)", "number"))
    nodes.append(_field(draft, m, "logo_text", "Logo Text", context="brand name"))
    nodes += [
        _select(draft, m, "nav_style", "Navigation Style", [("sticky", "Sticky"), ("static", "Static")]),
        _select(
            draft, m, "layout", "Layout", [("standard", "Standard"), ("centered", "Centered"), ("split", "Split")]
        ),
        _select(draft, m, "mobile_layout", "Mobile Layout", [("hamburger", "Hamburger"), ("bottom", "Bottom bar")]),
    ]
    options = link_options(c.catalogs)

    def menu_item(item, i):
        return [
            _item_field(item, i, m, "menu_items", "text", "Text", context="navigation link text"),
            _item_field(item, i, m, "menu_items", "link", "Link", "combo", options=options),
            _item_field(item, i, m, "menu_items", "icon_name", "Icon", "icon"),
        ]

    nodes.append(
        _items(draft, m, "menu_items", "Menu Items", "Add Menu Item", default_menu_item, menu_item)
    )
    nodes.append(_field(draft, m, "sign_in_button_enabled", "Show Sign In Button", "checkbox", rebuild=True))
    if draft.sign_in_button_enabled:
        nodes.append(_field(draft, m, "sign_in_button_text", "Sign In Button Text"))
    nodes.append(_field(draft, m, "cart_button_enabled", "Show Cart Button", "checkbox"))
    return nodes


def hero_form(draft, m, c) -> List[FieldNode]:
    nodes: List[FieldNode] = [
        _select(
            draft,
            m,
            "layout",
            "Layout",
            [("background", "Background"), ("split", "Split"), ("form_overlay", "Form overlay")],
            rebuild=True,
        ),
        _field(draft, m, "title", "Title", context="hero headline"),
        _field(draft, m, "subtitle", "Subtitle", "textarea", rows=3, context="hero subheadline"),
        _field(draft, m, "cta_text", "Button Text"),
        _field(draft, m, "cta_link", "Button Link", "combo", options=link_options(c.catalogs)),
    ]
    if draft.layout == "split":
        nodes.append(_image(draft, m, c, "split_image_prompt", "Side Image", "hero side image"))
    else:
        nodes.append(
            _select(
                draft,
                m,
                "background_type",
                "Background",
                [("image", "Image"), ("slider", "Slider"), ("video", "Video")],
                rebuild=True,
            )
        )
        if draft.background_type == "image":
            nodes.append(_image(draft, m, c, "image_prompt", "Background Image", "hero background image"))
        elif draft.background_type == "video":
            nodes.append(_field(draft, m, "youtube_video_id", "YouTube Video ID", placeholder="dQw4w9WgXcQ"))
        elif draft.background_type == "slider":

            def slide(item, i):
                return [
                    _item_field(item, i, m, "slides", "title", "Title"),
                    _item_field(item, i, m, "slides", "subtitle", "Subtitle", "textarea", rows=2),
                    _item_image(item, i, m, c, "slides", "image_prompt", "Image", "hero slide image"),
                ]

            nodes.append(_items(draft, m, "slides", "Slides", "Add Slide", default_slide, slide))
    if draft.layout == "form_overlay":
        forms = c.catalogs.custom_forms
        if forms:
            nodes.append(
                _select(draft, m, "form_id", "Form", [("", "Select a form")] + [(f.id, f.name) for f in forms])
            )
        else:
            nodes.append(FormField(name="form_id", label="Form", kind="notice", value="No custom forms yet."))
    nodes += [
        _field(draft, m, "button_color", "Button Color", "color"),
        _field(draft, m, "background_color_light", "Background (light mode)", "color"),
        _field(draft, m, "background_color_dark", "Background (dark mode)", "color"),
        _animation(draft, m),
    ]
    return nodes


def _feature_list_form(label: str) -> FormBuilder:
    def build(draft, m, c) -> List[FieldNode]:
        def feature(item, i):
            return [
                _item_field(item, i, m, "items", "icon_name", "Icon", "icon"),
                _item_field(item, i, m, "items", "title", "Title", context=f"{label} item title"),
                _item_field(item, i, m, "items", "description", "Description", "textarea", rows=3),
            ]

        header = lists.header_fields(draft, m.set_field, context=label)
        return [
            _items(draft, m, "items", "Items", "Add Feature", default_feature, feature, header),
            _animation(draft, m),
        ]

    return build


def gallery_form(draft, m, c) -> List[FieldNode]:
    def image(item, i):
        return [
            _item_image(item, i, m, c, "items", "image_prompt", "Image", "gallery image"),
            _item_field(item, i, m, "items", "alt_text", "Alt Text"),
        ]

    header = lists.header_fields(draft, m.set_field, context="gallery")
    return [
        _items(draft, m, "items", "Images", "Add Image", default_gallery_item, image, header),
        _animation(draft, m),
    ]


def testimonials_form(draft, m, c) -> List[FieldNode]:
    def testimonial(item, i):
        return [
            _item_field(item, i, m, "items", "quote", "Quote", "textarea", rows=3),
            _item_field(item, i, m, "items", "author", "Author"),
            _item_field(item, i, m, "items", "role", "Role"),
            _item_image(item, i, m, c, "items", "avatar_image_prompt", "Avatar", "customer portrait"),
        ]

    header = lists.header_fields(draft, m.set_field, context="testimonials")
    return [
        _items(draft, m, "items", "Testimonials", "Add Testimonial", default_testimonial, testimonial, header),
        _animation(draft, m),
    ]


def pricing_form(draft, m, c) -> List[FieldNode]:
    def plan(item, i):
        def feature(text, j):
            def apply(value: object, j=j) -> None:
                live = m.draft.plans[i].features
                m.set_item_field(i, "features", lists.replace_at(live, j, str(value)), field="plans")

            return [FormField(name=f"plans.{i}.features.{j}", label="Feature", value=text, on_change=apply)]

        return [
            _item_field(item, i, m, "plans", "name", "Plan Name"),
            _item_field(item, i, m, "plans", "price", "Price"),
            _item_field(item, i, m, "plans", "is_featured", "Featured", "checkbox"),
            _item_field(item, i, m, "plans", "cta_text", "Button Text"),
            _item_field(item, i, m, "plans", "cta_link", "Button Link", "combo", options=link_options(c.catalogs)),
            _nested(m, "plans", i, "features", item.features, "Features", "Add Feature", default_plan_feature, feature),
        ]

    header = lists.header_fields(draft, m.set_field, context="pricing")
    return [
        _items(draft, m, "plans", "Plans", "Add Plan", default_plan, plan, header),
        _animation(draft, m),
    ]


def faq_form(draft, m, c) -> List[FieldNode]:
    def faq(item, i):
        return [
            _item_field(item, i, m, "items", "question", "Question"),
            _item_field(item, i, m, "items", "answer", "Answer", "textarea", rows=3),
        ]

    header = lists.header_fields(draft, m.set_field, context="FAQ")
    return [
        _items(draft, m, "items", "Questions", "Add FAQ", default_faq, faq, header),
        _animation(draft, m),
    ]


def products_form(draft, m, c) -> List[FieldNode]:
    nodes = _title_subtitle(draft, m, "products")
    products = c.catalogs.products
    if products:
        options = [(p.id, f"{p.name} ({p.price:.2f})") for p in products]
        nodes.append(_field(draft, m, "item_ids", "Products", "multiselect", options=options))
    else:
        nodes.append(FormField(name="item_ids", label="Products", kind="notice", value="No products in the catalog."))
    nodes.append(_animation(draft, m))
    return nodes


def course_form(draft, m, c) -> List[FieldNode]:
    nodes = _title_subtitle(draft, m, "course")
    nodes += [
        _field(draft, m, "description", "Description", "textarea", rows=4, context="course description"),
        _select(draft, m, "media_type", "Media", [("image", "Image"), ("video", "Video")], rebuild=True),
    ]
    if draft.media_type == "video":
        nodes.append(_field(draft, m, "youtube_video_id", "YouTube Video ID"))
    else:
        nodes.append(_image(draft, m, c, "image_prompt", "Banner Image", "course banner"))
    nodes += [
        _field(draft, m, "price", "Price", "number"),
        _field(draft, m, "currency", "Currency"),
        _field(draft, m, "buy_button_text", "Buy Button Text"),
    ]

    def chapter(item, i):
        def lesson(les, j):
            def apply_for(name: str):
                def apply(value: object) -> None:
                    live = m.draft.chapters[i].lessons
                    changed = lists.replace_at(live, j, replace(live[j], **{name: value}))
                    m.set_item_field(i, "lessons", changed, field="chapters")

                return apply

            prefix = f"chapters.{i}.lessons.{j}"
            return [
                FormField(name=f"{prefix}.title", label="Lesson Title", value=les.title, on_change=apply_for("title")),
                FormField(
                    name=f"{prefix}.description",
                    label="Description",
                    kind="textarea",
                    rows=2,
                    value=les.description,
                    on_change=apply_for("description"),
                ),
                FormField(
                    name=f"{prefix}.youtube_video_id",
                    label="YouTube Video ID",
                    value=les.youtube_video_id,
                    on_change=apply_for("youtube_video_id"),
                ),
                FormField(name=f"{prefix}.duration", label="Duration", value=les.duration, on_change=apply_for("duration")),
                FormField(
                    name=f"{prefix}.is_free_preview",
                    label="Free Preview",
                    kind="checkbox",
                    value=les.is_free_preview,
                    on_change=apply_for("is_free_preview"),
                ),
            ]

        return [
            _item_field(item, i, m, "chapters", "title", "Chapter Title"),
            _item_image(item, i, m, c, "chapters", "image_prompt", "Chapter Image", "course chapter image"),
            _nested(m, "chapters", i, "lessons", item.lessons, "Lessons", "Add Lesson", default_lesson, lesson),
        ]

    nodes.append(_items(draft, m, "chapters", "Chapters", "Add Chapter", default_chapter, chapter))
    nodes.append(_animation(draft, m))
    return nodes


def video_form(draft, m, c) -> List[FieldNode]:
    return _title_subtitle(draft, m, "video") + [
        _field(draft, m, "video_id", "YouTube Video ID", placeholder="dQw4w9WgXcQ"),
        _animation(draft, m),
    ]


def booking_form(draft, m, c) -> List[FieldNode]:
    return _title_subtitle(draft, m, "booking") + [
        _field(draft, m, "cta_text", "Button Text"),
        _field(draft, m, "booking_embed_code", "Booking Embed Code", "code", rows=6),
        _animation(draft, m),
    ]


def contact_form(draft, m, c) -> List[FieldNode]:
    return _title_subtitle(draft, m, "contact") + [
        FormField(
            name="fields", label="Form", kind="notice", value="The contact form asks for name, email and message."
        ),
        _animation(draft, m),
    ]


def custom_form_form(draft, m, c) -> List[FieldNode]:
    nodes = _title_subtitle(draft, m, "form")
    forms = c.catalogs.custom_forms
    if forms:
        nodes.append(_select(draft, m, "form_id", "Form", [("", "Select a form")] + [(f.id, f.name) for f in forms]))
    else:
        nodes.append(FormField(name="form_id", label="Form", kind="notice", value="No custom forms yet."))
    nodes.append(_animation(draft, m))
    return nodes


def embed_form(draft, m, c) -> List[FieldNode]:
    return _title_subtitle(draft, m, "embed") + [
        _select(
            draft,
            m,
            "embed_type",
            "Embed Type",
            [("inline-iframe", "Inline (iframe)"), ("floating-script", "Floating widget (script)")],
        ),
        _field(draft, m, "embed_code", "Embed Code", "code", rows=8),
        _field(draft, m, "api_key", "API Key", placeholder="Replaces [api_key] in the embed code"),
        _animation(draft, m),
    ]


def cta_form(draft, m, c) -> List[FieldNode]:
    return _title_subtitle(draft, m, "call to action") + [
        _field(draft, m, "cta_text", "Button Text"),
        _field(draft, m, "cta_link", "Button Link", "combo", options=link_options(c.catalogs)),
        _animation(draft, m),
    ]


def footer_form(draft, m, c) -> List[FieldNode]:
    def social(item, i):
        return [
            _item_field(item, i, m, "social_links", "network", "Network", "select", options=[(n, n.title()) for n in SOCIAL_NETWORKS]),
            _item_field(item, i, m, "social_links", "url", "URL"),
        ]

    header = lists.header_fields(draft, m.set_field, title_field="copyright_text", subtitle_field=None)
    return [_items(draft, m, "social_links", "Social Links", "Add Link", default_social_link, social, header)]


# ---- table -------------------------------------------------------------


@dataclass(frozen=True)
class SectionType:
    kind: str
    label: str
    build_form: FormBuilder
    list_field: Optional[str] = None
    default_item: Optional[Callable[[], object]] = None
    extra_defaults: Dict[str, Callable[[], object]] = field(default_factory=dict)


REGISTRY: Dict[str, SectionType] = {
    t.kind: t
    for t in (
        SectionType("nav", "Navigation", nav_form, "menu_items", default_menu_item),
        SectionType("hero", "Hero", hero_form, "slides", default_slide),
        SectionType("features", "Features", _feature_list_form("features"), "items", default_feature),
        SectionType("whyChooseUs", "Why Choose Us", _feature_list_form("why choose us"), "items", default_feature),
        SectionType("gallery", "Gallery", gallery_form, "items", default_gallery_item),
        SectionType("testimonials", "Testimonials", testimonials_form, "items", default_testimonial),
        SectionType(
            "pricing", "Pricing", pricing_form, "plans", default_plan, {"features": default_plan_feature}
        ),
        SectionType("faq", "FAQ", faq_form, "items", default_faq),
        SectionType("products", "Products", products_form),
        SectionType("course", "Course", course_form, "chapters", default_chapter, {"lessons": default_lesson}),
        SectionType("video", "Video", video_form),
        SectionType("booking", "Booking", booking_form),
        SectionType("contact", "Contact", contact_form),
        SectionType("customForm", "Custom Form", custom_form_form),
        SectionType("embed", "Embed", embed_form),
        SectionType("cta", "Call to Action", cta_form),
        SectionType("footer", "Footer", footer_form, "social_links", default_social_link),
    )
}


def label_for(kind: str) -> str:
    entry = REGISTRY.get(kind)
    return entry.label if entry is not None else kind


def default_item(kind: str, list_field: Optional[str] = None) -> object:
    """A fresh default item for ``kind``'s main list (or a named nested list)."""
    entry = REGISTRY.get(kind)
    if entry is None:
        raise KeyError(kind)
    if list_field is None or list_field == entry.list_field:
        if entry.default_item is None:
            raise KeyError(f"{kind} has no list")
        return entry.default_item()
    return entry.extra_defaults[list_field]()


def _supports(kind: str, draft: Optional[Section]) -> bool:
    cls = SECTION_TYPES.get(kind)
    return kind in REGISTRY and cls is not None and isinstance(draft, cls)


def unsupported_form(kind: str) -> EditForm:
    message = f'Editing for the "{kind}" section type is not supported yet.'
    return EditForm(
        kind=kind,
        title=f"Edit {kind or 'Unknown'} Section",
        fields=[FormField(name="unsupported", label="Unsupported", kind="notice", value=message)],
        supported=False,
        message=message,
    )


def render_edit_form(
    kind: str,
    draft: Optional[Section],
    mutators: DraftStore,
    collaborators: Optional[FormCollaborators] = None,
) -> EditForm:
    if not _supports(kind, draft):
        logger.warning("No edit form for section kind %r", kind)
        return unsupported_form(kind)
    entry = REGISTRY[kind]
    fields = entry.build_form(draft, mutators, collaborators or FormCollaborators())
    return EditForm(kind=kind, title=f"Edit {entry.label} Section", fields=fields)


def render_preview(
    kind: str,
    draft: Section,
    images: Mapping[str, str],
    theme: Theme,
    catalogs: Optional[Catalogs] = None,
) -> str:
    """HTML fragment for ``draft`` as the live page would show it once saved."""
    return str(render_section(kind, draft, preview_images(draft, dict(images)), theme, PREVIEW, catalogs))
