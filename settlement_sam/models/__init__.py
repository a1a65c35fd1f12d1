# Models package - database models
from settlement_sam.models.lead import Lead, Tiers, LeadSources
from settlement_sam.models.client import Client
from settlement_sam.models.verification import VerificationCode
from settlement_sam.models.delivery import Delivery, DeliverySchedule, ScheduleDay
from settlement_sam.models.payment import Payment
from settlement_sam.models.admin import AdminUser, LoginAttempt
from settlement_sam.models.attorney import AttorneyInquiry
