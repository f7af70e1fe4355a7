# app/services/product_service.py
import logging
from collections.abc import Sequence
from dataclasses import dataclass

from sqlmodel import Session

from app.core.exceptions import NotFoundError, PayloadTooLarge, ValidationError
from app.core.storage_utils import ObjectStore
from app.models.product import Product
from app.repositories.product_repo import ProductRepository
from app.schemas.product import PRODUCT_FORM_FIELDS, ProductInput

logger = logging.getLogger(__name__)


# --- Image config ---

MAX_IMAGE_BYTES = 5 * 1024 * 1024  # 5MB per image

ALLOWED_IMAGE_CONTENT_TYPES: dict[str, str] = {
    "image/jpeg": "jpg",
    "image/png": "png",
    "image/webp": "webp",
    "image/gif": "gif",
}


@dataclass
class ImageUpload:
    content_type: str | None
    data: bytes


class ProductService:
    """
    Business logic for Product.

    Responsibilities:
      - required-field validation (configurable set)
      - image resolution: uploaded file wins, else direct imageUrl
      - fetch-then-merge updates so omitted fields are never nulled out

    Uploads always run before the session touches the database, so no
    pooled connection is held while waiting on the object store.
    """

    def __init__(
        self,
        repo: ProductRepository,
        store: ObjectStore,
        required_fields: Sequence[str] = ("title", "category"),
    ):
        self.repo = repo
        self.store = store
        self.required_fields = list(required_fields)

    # ----- Helpers -----

    @staticmethod
    def _validate_and_get_ext(content_type: str | None, file_bytes: bytes) -> str:
        if content_type not in ALLOWED_IMAGE_CONTENT_TYPES:
            raise ValidationError("Unsupported image type. Allowed: JPEG, PNG, WEBP, GIF.")

        if len(file_bytes) > MAX_IMAGE_BYTES:
            raise PayloadTooLarge()

        return ALLOWED_IMAGE_CONTENT_TYPES[content_type]

    def _missing_fields(self, payload: ProductInput) -> list[str]:
        missing = []
        for form_name in self.required_fields:
            attr = PRODUCT_FORM_FIELDS.get(form_name, form_name)
            if getattr(payload, attr, None) is None:
                missing.append(form_name)
        return missing

    def _resolve_image(
        self,
        payload: ProductInput,
        upload: ImageUpload | None,
    ) -> str | None:
        """
        Return the image URL for this request, uploading the file if present.
        """
        if upload is not None and upload.data:
            ext = self._validate_and_get_ext(upload.content_type, upload.data)
            return self.store.upload(upload.data, ext, upload.content_type)
        return payload.image_url

    # ----- Products -----

    def list_products(self, session: Session) -> list[Product]:
        return self.repo.list(session)

    def create_product(
        self,
        session: Session,
        payload: ProductInput,
        upload: ImageUpload | None = None,
    ) -> Product:
        """
        Create a product.

        - 400 if a required field is missing
        - 400 if neither an image file nor imageUrl was sent
        - file upload finishes before the row is inserted
        """
        missing = self._missing_fields(payload)
        if missing:
            raise ValidationError(f"Missing required fields: {', '.join(missing)}")

        has_file = upload is not None and bool(upload.data)
        if not has_file and payload.image_url is None:
            raise ValidationError("Image file or imageUrl is required")

        image = self._resolve_image(payload, upload)

        product = Product(
            title=payload.title,
            description=payload.description,
            image=image,
            weight=payload.weight,
            category=payload.category,
        )
        product = self.repo.create(session, product)
        logger.info(f"🆕 Product {product.id} created")
        return product

    def update_product(
        self,
        session: Session,
        product_id: int,
        payload: ProductInput,
        upload: ImageUpload | None = None,
    ) -> Product:
        """
        Partial update of a product.

        Only fields present in the request are changed; the image is
        replaced only if a new file or imageUrl is supplied.

        Existence is checked before uploading so an unknown id never leaves
        an orphan object in the bucket; the read transaction is closed
        before the upload so no pooled connection waits on the object store.
        """
        product = self.repo.get_by_id(session, product_id)
        if not product:
            raise NotFoundError("Product not found")
        session.rollback()

        new_image = self._resolve_image(payload, upload)

        if payload.title is not None:
            product.title = payload.title

        if payload.description is not None:
            product.description = payload.description

        if payload.weight is not None:
            product.weight = payload.weight

        if payload.category is not None:
            product.category = payload.category

        if new_image is not None:
            product.image = new_image

        return self.repo.update(session, product)

    def delete_product(self, session: Session, product_id: int) -> None:
        """
        Delete a product by id. Deleting an unknown id is not an error.
        """
        self.repo.delete_by_id(session, product_id)
        logger.info(f"🗑️ Product {product_id} deleted")
