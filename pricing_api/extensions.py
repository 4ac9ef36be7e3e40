# pricing_api/extensions.py
from flask_cors import CORS

cors = CORS()
