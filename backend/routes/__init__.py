# routes -- one APIRouter per resource, included by backend.app
