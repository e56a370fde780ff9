from flask import Blueprint, redirect, url_for

main = Blueprint("main", __name__)


@main.route("/")
def home():
    """Send visitors to the invoice entry form."""
    return redirect(url_for("invoicing.add_invoice"))
