import re
from datetime import date
from decimal import Decimal

from flask_wtf import FlaskForm
from wtforms import (
    DateField,
    DecimalField as WTFormsDecimalField,
    HiddenField,
    PasswordField,
    StringField,
    SubmitField,
    TextAreaField,
)
from wtforms.validators import (
    DataRequired,
    InputRequired,
    Length,
    NumberRange,
    Optional,
    StopValidation,
    ValidationError,
)

# Largest value an Invoice.amount Numeric(12, 2) column holds.
MAX_AMOUNT = Decimal("9999999999.99")


class MoneyField(WTFormsDecimalField):
    """Decimal field for invoice amounts.

    Amounts are accepted the way people type them (``"$1,234.50"``,
    ``"1 234,50 €"``) and refused when they carry more decimals than the
    ``Numeric(precision, scale)`` column that stores them, so nothing is
    silently rounded on save.
    """

    CURRENCY_SYMBOLS = "$€£¥"
    _GROUPING = re.compile(r"[\s_']")

    def __init__(self, label=None, validators=None, scale=2, render_kw=None, **kwargs):
        render_kw = dict(render_kw or {})
        render_kw.setdefault("inputmode", "decimal")
        super().__init__(label, validators, places=scale, render_kw=render_kw, **kwargs)
        self.scale = scale

    @classmethod
    def clean_amount(cls, text):
        """Return ``text`` as a plain decimal string ``Decimal`` can parse."""
        cleaned = cls._GROUPING.sub("", text.strip().strip(cls.CURRENCY_SYMBOLS))
        if "." in cleaned:
            # Whichever separator comes last marks the cents.
            decimal_comma = cleaned.rfind(",") > cleaned.rfind(".")
        else:
            decimal_comma = (
                cleaned.count(",") == 1
                and 0 < len(cleaned.rpartition(",")[2]) <= 2
            )
        if decimal_comma:
            return cleaned.replace(".", "").replace(",", ".")
        return cleaned.replace(",", "")

    def process_formdata(self, valuelist):
        # raw_data keeps the user's input for re-rendering.
        if valuelist and valuelist[0]:
            valuelist = [self.clean_amount(str(valuelist[0]))]
        super().process_formdata(valuelist)

    def pre_validate(self, form):
        if self.data is None:
            return
        if not self.data.is_finite():
            raise StopValidation("Not a valid amount.")
        if self.data.normalize().as_tuple().exponent < -self.scale:
            raise StopValidation(
                f"Amounts cannot have more than {self.scale} decimal places."
            )


class LoginForm(FlaskForm):
    username = StringField("Username", validators=[DataRequired()])
    password = PasswordField("Password", validators=[DataRequired()])


class InvoiceForm(FlaskForm):
    """Shared form for adding and editing invoices."""

    invoice_id = HiddenField("Invoice ID")
    payer = StringField("Payer", validators=[DataRequired(), Length(max=120)])
    amount = MoneyField(
        "Amount",
        validators=[
            InputRequired(),
            NumberRange(min=Decimal("0.01"), max=MAX_AMOUNT),
        ],
    )
    description = TextAreaField(
        "Description", validators=[Optional(), Length(max=500)]
    )
    date_issued = DateField(
        "Date Issued", validators=[DataRequired()], default=date.today
    )
    date_due = DateField("Date Due", validators=[Optional()])
    submit = SubmitField("Save")

    def validate_date_due(self, field):
        if field.data and self.date_issued.data and field.data < self.date_issued.data:
            raise ValidationError("Due date cannot be before the issue date.")


class PayInvoiceForm(FlaskForm):
    """CSRF protection for the mark-as-paid button."""

    submit = SubmitField("Mark Paid")
