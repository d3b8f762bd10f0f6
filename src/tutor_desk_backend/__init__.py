'''
TutorDesk Backend: students, lessons, payments, timetable, resources and
generated documents for an independent tutor.
'''
