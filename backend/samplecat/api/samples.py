"""Sample catalog endpoints."""

from __future__ import annotations

from flask import Blueprint, request

from samplecat.api.deps import (
    current_actor_id,
    envelope,
    parse_list_query,
    read_image,
    require_auth,
    sample_service,
    timing,
)
from samplecat.schemas import MetaSchema, SampleFormSchema, SampleSchema
from samplecat.services.samples.dto import SampleCreateIn, SampleListOut, SampleUpdateIn

bp = Blueprint("samples", __name__)

sample_schema = SampleSchema()
samples_schema = SampleSchema(many=True)
meta_schema = MetaSchema()
form_schema = SampleFormSchema()


def _page_payload(result: SampleListOut) -> dict:
    return {"items": samples_schema.dump(result.items), "meta": meta_schema.dump(result.meta)}


@bp.post("")
@bp.post("/")
@require_auth
@timing
def create_sample():
    """Multipart: ``name``, ``description`` and an optional ``image`` file."""
    form = form_schema.load(request.form)
    dto = SampleCreateIn(
        actor_id=current_actor_id(),
        name=form["name"],
        description=form["description"],
        image=read_image("image"),
    )
    sample = sample_service().create(dto)
    return envelope(sample_schema.dump(sample), message="Sample created successfully", status=201)


@bp.get("")
@bp.get("/")
@require_auth
@timing
def list_samples():
    result = sample_service().list_all(parse_list_query())
    return envelope(_page_payload(result), message="Samples retrieved")


@bp.get("/my-samples")
@require_auth
@timing
def my_samples():
    items = sample_service().list_mine(current_actor_id())
    return envelope(samples_schema.dump(items), message="Your samples retrieved")


@bp.get("/user/<int:user_id>")
@require_auth
@timing
def samples_by_user(user_id: int):
    result = sample_service().list_by_user(user_id, parse_list_query())
    return envelope(_page_payload(result), message="User samples retrieved")


@bp.get("/<int:sample_id>")
@require_auth
@timing
def get_sample(sample_id: int):
    sample = sample_service().get(sample_id)
    return envelope(sample_schema.dump(sample), message="Sample found")


@bp.put("/<int:sample_id>")
@require_auth
@timing
def update_sample(sample_id: int):
    """Only fields present in the form are changed; ``image`` replaces the old one."""
    form = form_schema.load(request.form, partial=True)
    dto = SampleUpdateIn(
        actor_id=current_actor_id(),
        sample_id=sample_id,
        name=form.get("name"),
        description=form.get("description"),
        image=read_image("image"),
    )
    sample = sample_service().update(dto)
    return envelope(sample_schema.dump(sample), message="Sample updated successfully")


@bp.delete("/<int:sample_id>")
@require_auth
@timing
def delete_sample(sample_id: int):
    sample_service().delete(actor_id=current_actor_id(), sample_id=sample_id)
    return envelope(None, message="Sample deleted successfully")
