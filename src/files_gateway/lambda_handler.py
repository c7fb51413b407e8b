"""Lambda handler for the Files Gateway using Mangum."""
from mangum import Mangum
from files_gateway.main import create_app

# Create FastAPI app
app = create_app()

# Lifespan stays on so the object store is built and closed with the app
handler = Mangum(app, lifespan="auto")

# Export handler for Lambda runtime
lambda_handler = handler
