from dairy_app.models.customer import Customer
from dairy_app.models.order import Order
from dairy_app.models.subscription import Subscription, SubscriptionDay
