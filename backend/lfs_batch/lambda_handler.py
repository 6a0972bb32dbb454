"""AWS Lambda entry point: API Gateway / function URL events served by the ASGI app.

Deploy with handler ``lfs_batch.lambda_handler.handler``. Objects transit S3 directly from
the git client, so Lambda deployments usually set ``S3_ACCELERATE=1`` to mint Transfer
Acceleration URLs (ignored for non-Amazon endpoints).
"""
from mangum import Mangum

from lfs_batch.main import app

handler = Mangum(app)
