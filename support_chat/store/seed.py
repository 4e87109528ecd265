"""Reference FAQ rows loaded into an empty ``faq_knowledge`` table."""

from __future__ import annotations

# (category, question, answer)
FAQ_SEED: list[tuple[str, str, str]] = [
    (
        "Shipping",
        "How long does shipping take?",
        "Standard shipping takes 5-7 business days. Express shipping takes "
        "2-3 business days. Orders placed before 2 PM EST ship the same day.",
    ),
    (
        "Shipping",
        "Do you ship internationally?",
        "Yes, we ship to over 50 countries. International delivery usually "
        "takes 10-15 business days. Customs duties are paid by the recipient.",
    ),
    (
        "Shipping",
        "How much does shipping cost?",
        "Standard shipping is free on orders over $50, otherwise $5.99. "
        "Express shipping costs $14.99.",
    ),
    (
        "Returns",
        "What is your return policy?",
        "You can return any unused item in its original packaging within 30 "
        "days of delivery for a full refund.",
    ),
    (
        "Returns",
        "How do I start a return?",
        "Open your order in your account, choose 'Return item' and print the "
        "prepaid label. Drop the parcel at any carrier location.",
    ),
    (
        "Returns",
        "When will I get my refund?",
        "Refunds are issued to the original payment method within 5-7 "
        "business days after we receive the returned item.",
    ),
    (
        "Payment",
        "Which payment methods do you accept?",
        "We accept Visa, Mastercard, American Express, PayPal, Apple Pay and "
        "Google Pay.",
    ),
    (
        "Orders",
        "Can I change or cancel my order?",
        "Orders can be changed or cancelled within 1 hour of purchase. After "
        "that the order is already being prepared for shipment.",
    ),
    (
        "Orders",
        "How can I track my order?",
        "A tracking link is emailed as soon as your order ships. You can also "
        "find it under 'My orders' in your account.",
    ),
    (
        "Support",
        "What are your support hours?",
        "Our support team is available Monday to Friday, 9 AM to 6 PM EST. "
        "You can also email support@example.com at any time.",
    ),
]
