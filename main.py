import logging
import time
from contextlib import asynccontextmanager
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

from fastapi import Depends, FastAPI, Response
from fastapi.middleware.cors import CORSMiddleware
from pymongo.database import Database
from pymongo.errors import DuplicateKeyError

import queries
from auth import (
    clear_token_cookie,
    create_access_token,
    require_admin,
    require_creator,
    require_role,
    set_token_cookie,
    verify_token,
)
from config import get_settings
from database import (
    CONTESTS,
    REGISTRATIONS,
    USERS,
    close_db,
    create_document,
    delete_ack,
    get_db,
    init_db,
    insert_ack,
    parse_object_id,
    ping,
    serialize_doc,
    update_ack,
)
from error_handlers import register_error_handlers
from errors import ResourceNotFoundError, WinnerAlreadyDeclaredError
from observability import log_requests, setup_logging
from payments import create_payment_intent
from schemas import (
    Contest,
    ContestUpdate,
    PaymentIntentRequest,
    PersonInfo,
    Registration,
    StatusUpdate,
    TokenRequest,
    UserUpdate,
    UserUpsert,
)

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    settings = get_settings()
    setup_logging(settings.log_level, settings.log_format)
    init_db(settings.db_uri, settings.db_name)
    logger.info(f"Contest hub API started ({settings.node_env})")
    yield
    close_db()
    logger.info("Contest hub API shut down")


# App and CORS
settings = get_settings()
app = FastAPI(title="Contest Hub API", lifespan=lifespan)
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.allowed_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)
app.middleware("http")(log_requests)
register_error_handlers(app)


def _now():
    return datetime.now(timezone.utc)


def _docs(cursor) -> List[Dict[str, Any]]:
    return [serialize_doc(d) for d in cursor]


# Routes
@app.get("/")
def read_root():
    return "Hello from contest hub Server.."


@app.get("/health")
def health(db: Database = Depends(get_db)):
    ok = ping(db)
    return {"status": "healthy" if ok else "degraded", "database": "connected" if ok else "unreachable"}


# Auth Endpoints
@app.post("/jwt")
def issue_token(body: TokenRequest, response: Response):
    token = create_access_token(body.model_dump())
    set_token_cookie(response, token)
    logger.info("Issued session token", extra={"email": body.email})
    return {"success": True}


@app.get("/logout")
def logout(response: Response):
    clear_token_cookie(response)
    return {"success": True}


# User Endpoints
@app.put("/users/{email}")
def save_user(email: str, body: UserUpsert, db: Database = Depends(get_db)):
    query = {"email": email}
    existing = db[USERS].find_one(query)
    if existing is not None:
        return serialize_doc(existing)
    data = body.model_dump()
    for key in ("_id", "role"):
        data.pop(key, None)
    data.update({"email": email, "timestamp": int(time.time() * 1000)})
    try:
        result = db[USERS].update_one(
            query,
            {"$set": data, "$setOnInsert": {"role": "none"}},
            upsert=True,
        )
    except DuplicateKeyError:
        # A concurrent first login inserted this email between the find and the upsert
        logger.info("User already created by a concurrent request", extra={"email": email})
        return serialize_doc(db[USERS].find_one(query))
    return update_ack(result)


@app.put("/users/update/{email}")
def update_user(
    email: str,
    body: UserUpdate,
    admin: dict = Depends(require_admin),
    db: Database = Depends(get_db),
):
    data = body.model_dump(exclude_none=True)
    data.pop("_id", None)
    data["timestamp"] = int(time.time() * 1000)
    result = db[USERS].update_one({"email": email}, {"$set": data})
    logger.info(f"User {email} updated by {admin.get('email')}", extra={"email": email})
    return update_ack(result)


@app.get("/user/{email}")
def get_user(email: str, db: Database = Depends(get_db)):
    return serialize_doc(db[USERS].find_one({"email": email}))


@app.get("/users")
def list_users(admin: dict = Depends(require_admin), db: Database = Depends(get_db)):
    return _docs(db[USERS].find())


# Contest Endpoints
@app.get("/contests")
def list_contests(category: Optional[str] = None, db: Database = Depends(get_db)):
    return _docs(db[CONTESTS].find(queries.approved_contests(category)))


@app.get("/all_contests")
def list_all_contests(admin: dict = Depends(require_admin), db: Database = Depends(get_db)):
    return _docs(db[CONTESTS].find())


@app.get("/top_contests")
def top_contests(db: Database = Depends(get_db)):
    cursor = db[CONTESTS].find(queries.approved_contests()).sort("attemptedCount", -1).limit(5)
    return _docs(cursor)


@app.get("/contest/{contest_id}")
def get_contest(contest_id: str, db: Database = Depends(get_db)):
    return serialize_doc(db[CONTESTS].find_one({"_id": parse_object_id(contest_id)}))


@app.get("/search_contests/{category}")
def search_contests(category: str, db: Database = Depends(get_db)):
    return _docs(db[CONTESTS].find(queries.category_search(category)))


@app.post("/contests")
def create_contest(
    contest: Contest,
    creator: dict = Depends(require_creator),
    db: Database = Depends(get_db),
):
    doc = contest.model_dump()
    doc.update({"status": queries.PENDING, "attemptedCount": 0, "participants": []})
    result = create_document(db, CONTESTS, doc)
    logger.info(
        f"Contest '{contest.name}' created",
        extra={"email": creator.get("email"), "contest_id": str(result.inserted_id)},
    )
    return insert_ack(result)


@app.get("/contests/{email}")
def list_creator_contests(
    email: str,
    creator: dict = Depends(require_creator),
    db: Database = Depends(get_db),
):
    return _docs(db[CONTESTS].find(queries.by_creator(email)))


@app.patch("/update_contest/{contest_id}")
def update_contest(
    contest_id: str,
    body: ContestUpdate,
    creator: dict = Depends(require_creator),
    db: Database = Depends(get_db),
):
    data = body.model_dump(exclude_unset=True)
    data["updated_at"] = _now()
    result = db[CONTESTS].update_one({"_id": parse_object_id(contest_id)}, {"$set": data})
    return update_ack(result)


@app.patch("/update_contest_status/{contest_id}")
def update_contest_status(
    contest_id: str,
    body: StatusUpdate,
    admin: dict = Depends(require_admin),
    db: Database = Depends(get_db),
):
    result = db[CONTESTS].update_one(
        {"_id": parse_object_id(contest_id)},
        {"$set": {"status": body.status, "updated_at": _now()}},
        upsert=True,
    )
    logger.info(f"Contest status set to {body.status}", extra={"contest_id": contest_id})
    return update_ack(result)


@app.delete("/delete_contest/{contest_id}")
def delete_contest(
    contest_id: str,
    caller: dict = Depends(require_role("admin", "creator")),
    db: Database = Depends(get_db),
):
    result = db[CONTESTS].delete_one({"_id": parse_object_id(contest_id)})
    logger.info("Contest deleted", extra={"contest_id": contest_id, "email": caller.get("email")})
    return delete_ack(result)


@app.patch("/declare_winner/{contest_id}")
def declare_winner(
    contest_id: str,
    winner: PersonInfo,
    creator: dict = Depends(require_creator),
    db: Database = Depends(get_db),
):
    oid = parse_object_id(contest_id)
    result = db[CONTESTS].update_one(
        queries.without_winner(oid),
        {"$set": {"winnerInfo": winner.model_dump(), "updated_at": _now()}},
    )
    if result.matched_count == 0:
        if db[CONTESTS].find_one({"_id": oid}, {"_id": 1}) is None:
            raise ResourceNotFoundError("Contest", contest_id)
        raise WinnerAlreadyDeclaredError(contest_id)
    logger.info(f"Winner declared: {winner.email}", extra={"contest_id": contest_id})
    return update_ack(result)


# Participation Endpoints
@app.post("/create_payment_intent")
def payment_intent(body: PaymentIntentRequest, user: dict = Depends(verify_token)):
    settings = get_settings()
    client_secret = create_payment_intent(
        body.price, settings.stripe_secret_key, settings.payment_currency,
    )
    return {"clientSecret": client_secret}


@app.post("/registrations")
def create_registration(
    registration: Registration,
    user: dict = Depends(verify_token),
    db: Database = Depends(get_db),
):
    parse_object_id(registration.contestId)
    result = create_document(db, REGISTRATIONS, registration)
    return insert_ack(result)


@app.get("/registrations/{contest_id}")
def list_registrations(
    contest_id: str,
    creator: dict = Depends(require_creator),
    db: Database = Depends(get_db),
):
    parse_object_id(contest_id)
    return _docs(db[REGISTRATIONS].find({"contestId": contest_id}))


@app.patch("/save_participant_info/{contest_id}")
def save_participant_info(
    contest_id: str,
    participant: PersonInfo,
    user: dict = Depends(verify_token),
    db: Database = Depends(get_db),
):
    # Separate from the registration insert; the two writes are not atomic
    result = db[CONTESTS].update_one(
        {"_id": parse_object_id(contest_id)},
        {
            "$inc": {"attemptedCount": 1},
            "$push": {"participants": participant.model_dump()},
        },
    )
    return update_ack(result)


@app.get("/my_participated_contests/{email}")
def my_participated_contests(
    email: str,
    user: dict = Depends(verify_token),
    db: Database = Depends(get_db),
):
    return _docs(db[CONTESTS].find(queries.by_participant(email)))


@app.get("/my_winning_contests/{email}")
def my_winning_contests(
    email: str,
    user: dict = Depends(verify_token),
    db: Database = Depends(get_db),
):
    return _docs(db[CONTESTS].find(queries.by_winner(email)))


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host="0.0.0.0", port=settings.port)
