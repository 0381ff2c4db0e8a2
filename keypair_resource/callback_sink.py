from flask import Flask, request, jsonify, url_for
from sqlalchemy import create_engine, Column, DateTime, Integer, String, Text, func
from sqlalchemy.orm import declarative_base, sessionmaker
from pydantic import ValidationError
import argparse

from keypair_resource.config import configure_logging
from keypair_resource.errors import InvalidRequestError
from keypair_resource.handler import default_handler
from keypair_resource.models import CallbackResponse

app = Flask(__name__)

# Define the table structure
Base = declarative_base()

session = None
handler = None


class CallbackRecord(Base):
    __tablename__ = "callbacks"
    id = Column(Integer, primary_key=True, autoincrement=True)
    request_id = Column(String, nullable=False, index=True)
    logical_resource_id = Column(String, nullable=False)
    physical_resource_id = Column(String, nullable=False)
    status = Column(String, nullable=False)
    reason = Column(String, nullable=True)
    body = Column(Text, nullable=False)
    received_at = Column(DateTime, server_default=func.now())

    def to_dict(self):
        return {
            "id": self.id,
            "request_id": self.request_id,
            "logical_resource_id": self.logical_resource_id,
            "physical_resource_id": self.physical_resource_id,
            "status": self.status,
            "reason": self.reason,
            "body": self.body,
        }


# Initialize the database engine and session
def init_db(database_url):
    engine = create_engine(database_url, echo=False)
    Base.metadata.create_all(engine)  # Ensure the table is created
    Session = sessionmaker(bind=engine)
    return Session()


def get_handler():
    return handler or default_handler()


# CloudFormation sends an empty content type, so read the raw body
@app.route("/callbacks/<request_id>", methods=["PUT"])
def receive_callback(request_id):
    body = request.get_data(as_text=True)
    try:
        response = CallbackResponse.model_validate_json(body)
    except ValidationError as e:
        return jsonify({"error": "Invalid callback body", "detail": str(e)}), 400

    record = CallbackRecord(
        request_id=request_id,
        logical_resource_id=response.logical_resource_id,
        physical_resource_id=response.physical_resource_id,
        status=response.status.value,
        reason=response.reason,
        body=body,
    )
    session.add(record)
    session.commit()
    return "", 200


@app.route("/api/callbacks", methods=["GET"])
def list_callbacks():
    rows = session.query(CallbackRecord).order_by(CallbackRecord.id).all()
    return jsonify([row.to_dict() for row in rows])


@app.route("/api/callbacks/<request_id>", methods=["GET"])
def get_callbacks(request_id):
    rows = session.query(CallbackRecord).filter_by(request_id=request_id).order_by(CallbackRecord.id).all()
    if not rows:
        return jsonify({"error": "Record not found"}), 404
    return jsonify([row.to_dict() for row in rows])


@app.route("/invoke", methods=["POST"])
def invoke():
    """
    Run the lifecycle handler locally, reporting back to this sink by default.
    """
    event = request.get_json(force=True)
    if not isinstance(event, dict):
        return jsonify({"error": "Event body must be a JSON object"}), 400
    event = dict(event)
    if not event.get("ResponseURL") and event.get("RequestId"):
        event["ResponseURL"] = url_for("receive_callback", request_id=event["RequestId"], _external=True)

    try:
        response = get_handler().handle(event)
    except InvalidRequestError as e:
        return jsonify({"error": str(e)}), 400

    if response is None:
        return jsonify({"ignored": True}), 200
    return app.response_class(response.to_json(), mimetype="application/json")


# Main entry point
if __name__ == "__main__":
    # Parse command-line arguments
    parser = argparse.ArgumentParser(description="Run a local callback sink for the key pair custom resource.")
    parser.add_argument("--db", type=str, default="callbacks.db", help="Database file name (default: callbacks.db)")
    parser.add_argument("--port", type=int, default=5000, help="Port to run the application on (default: 5000)")
    parser.add_argument("--host", type=str, default="0.0.0.0", help="Host IP address (default: 0.0.0.0)")
    parser.add_argument("--log-level", type=str, default="INFO", help="Log level (default: INFO)")
    args = parser.parse_args()

    configure_logging(args.log_level)

    # Initialize the database
    database_url = f"sqlite:///{args.db}"
    session = init_db(database_url)

    # Run the Flask application
    app.run(host=args.host, port=args.port)
