import boto3
from botocore.exceptions import ClientError
import mimetypes
import os
import logging
import uuid

logger = logging.getLogger(__name__)

AWS_REGION = os.getenv('AWS_DEFAULT_REGION', 'eu-west-3')
S3_BUCKET_NAME = os.getenv('S3_BUCKET_NAME', 'supplier-invoices')
INVOICE_IMAGE_PREFIX = os.getenv('S3_INVOICE_IMAGE_PREFIX', 'supplier-invoices')
PRESIGNED_URL_TTL = int(os.getenv('S3_PRESIGNED_URL_TTL', '3600'))

# Photos or scans of the supplier's paper invoice
ALLOWED_EXTENSIONS = {'jpg', 'jpeg', 'png', 'webp', 'heic', 'pdf'}

_s3_client = None


def get_s3_client():
    """Lazily create one boto3 client per process."""
    global _s3_client
    if _s3_client is None:
        try:
            _s3_client = boto3.client('s3', region_name=AWS_REGION)
        except Exception:
            logger.exception("Failed to create boto3 S3 client")
            raise
        logger.info(f"S3 client ready for bucket {S3_BUCKET_NAME} in {AWS_REGION}")
    return _s3_client


def invoice_image_key(supplier_order_id: int, filename: str) -> str:
    extension = filename.rsplit('.', 1)[-1].lower() if '.' in filename else ''
    if extension not in ALLOWED_EXTENSIONS:
        raise ValueError(
            f"Unsupported invoice image type '{extension or filename}'. "
            f"Allowed: {', '.join(sorted(ALLOWED_EXTENSIONS))}"
        )
    return f"{INVOICE_IMAGE_PREFIX}/{supplier_order_id}/{uuid.uuid4().hex}.{extension}"


def split_s3_path(s3_path: str):
    """`s3://bucket/key` -> (bucket, key) for paths in our bucket."""
    prefix = f"s3://{S3_BUCKET_NAME}/"
    if not s3_path.startswith(prefix) or len(s3_path) == len(prefix):
        raise ValueError(f"Invalid S3 path. Must start with '{prefix}'")
    return S3_BUCKET_NAME, s3_path[len(prefix):]


def generate_presigned_upload_url(object_id: int, filename: str, expires_in: int = PRESIGNED_URL_TTL) -> dict:
    """
    Pre-signed PUT for a supplier invoice image.

    Returns the URL the browser uploads to and the `s3://` path that is stored
    on the supplier order.
    """
    s3_key = invoice_image_key(object_id, filename)
    content_type = mimetypes.guess_type(filename)[0] or 'application/octet-stream'

    try:
        url = get_s3_client().generate_presigned_url(
            'put_object',
            Params={'Bucket': S3_BUCKET_NAME, 'Key': s3_key, 'ContentType': content_type},
            ExpiresIn=expires_in
        )
    except ClientError as e:
        logger.exception(f"Failed to presign upload for supplier order {object_id}")
        raise RuntimeError(f"Could not generate S3 upload URL: {e}")

    logger.info(f"Presigned upload for supplier order {object_id}: {s3_key}")
    return {"upload_url": url, "s3_path": f"s3://{S3_BUCKET_NAME}/{s3_key}"}


def generate_presigned_download_url(s3_path: str, expires_in: int = PRESIGNED_URL_TTL) -> str:
    bucket, s3_key = split_s3_path(s3_path)
    client = get_s3_client()

    try:
        # Presigning never checks the object, so look it up first
        client.head_object(Bucket=bucket, Key=s3_key)
        return client.generate_presigned_url(
            'get_object',
            Params={'Bucket': bucket, 'Key': s3_key},
            ExpiresIn=expires_in
        )
    except ClientError as e:
        if e.response.get('Error', {}).get('Code') in ('404', 'NoSuchKey', 'NotFound'):
            raise FileNotFoundError(f"Invoice image not found: {s3_path}")
        logger.exception(f"Failed to presign download for {s3_path}")
        raise RuntimeError(f"Could not generate S3 download URL: {e}")
